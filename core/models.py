"""
Database models for the clinic backend.

These models capture the clinic's operational records: staff users and
their roles, patients, appointments, payments, clinical notes, lab tests,
prescriptions, pharmacy inventory and the diagnostic order queues of the
nursing and ultrasound departments.  Referential integrity is left to the
database: patient-owned rows are protected from cascading deletes, while
references to the acting staff member are nulled when that user is
removed.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    """Closed set of operator categories; each route allows a subset."""
    ADMIN = 'admin', _('Administrator')
    DOCTOR = 'doctor', _('Doctor')
    RECEPTION = 'reception', _('Reception')
    LAB = 'lab', _('Laboratory')
    PHARMACY = 'pharmacy', _('Pharmacy')
    NURSE = 'nurse', _('Nursing')
    ULTRASOUND = 'ultrasound', _('Ultrasound')


class User(AbstractUser):
    """Staff account with a single role.

    ``is_active`` is the account's active flag; inactive users cannot log
    in.  The record with id ``settings.PRIMARY_ADMIN_ID`` is the primary
    administrator and is protected from deletion and deactivation.
    """
    name = models.CharField(max_length=150)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.RECEPTION, db_index=True)
    shift = models.CharField(max_length=64, blank=True)
    phone = models.CharField(max_length=32, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Patient(models.Model):
    """Demographics and clinical history.  Phone and national id are
    informational and carry no uniqueness constraint."""
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32)
    age = models.PositiveIntegerField()
    gender = models.CharField(max_length=16)
    blood_type = models.CharField(max_length=8, blank=True)
    national_id = models.CharField(max_length=64, blank=True)
    address = models.TextField(blank=True)
    allergies = models.TextField(blank=True)
    chronic_diseases = models.TextField(blank=True)
    previous_surgeries = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} (#{self.id})"


class Appointment(models.Model):
    STATUS_CHOICES = [
        ('scheduled', 'Scheduled'),
        ('confirmed', 'Confirmed'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('no_show', 'No show'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='appointments')
    doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments'
    )
    appointment_date = models.DateField(db_index=True)
    appointment_time = models.TimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='scheduled', db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Appointment {self.id} for {self.patient_id} on {self.appointment_date}"


class Payment(models.Model):
    METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('insurance', 'Insurance'),
        ('bankak', 'Bankak'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=16, choices=METHOD_CHOICES)
    payment_status = models.CharField(max_length=16, default='completed')
    # PNG data URL, only present for the QR payment method.
    qr_code = models.TextField(blank=True, null=True)
    reference = models.CharField(max_length=64, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self) -> str:
        return f"Payment {self.id}: {self.amount} via {self.payment_method}"


class MedicalRecord(models.Model):
    """Append-only clinical note written by a doctor."""
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='medical_records')
    doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='medical_records'
    )
    symptoms = models.TextField(blank=True)
    diagnosis = models.TextField(blank=True)
    treatment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['patient', 'created_at'], name='medrec_patient_created_idx')]


class LabTest(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('in_progress', 'In progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='lab_tests')
    doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='lab_tests'
    )
    # Comma separated test names, e.g. "CBC, ESR".
    test_names = models.TextField()
    results = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='pending', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"LabTest {self.id} ({self.status})"


class TestStatistic(models.Model):
    """Denormalised request counter per lab test name."""
    test_name = models.CharField(max_length=255, primary_key=True)
    count = models.PositiveIntegerField(default=0)

    def __str__(self) -> str:
        return f"{self.test_name}: {self.count}"


class Prescription(models.Model):
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='prescriptions')
    doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='prescriptions'
    )
    medicine_name = models.CharField(max_length=255)
    dosage = models.CharField(max_length=128)
    frequency = models.CharField(max_length=128)
    duration = models.PositiveIntegerField(help_text="Duration in days")
    timing = models.CharField(max_length=128)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='active', db_index=True)
    # Set only by pharmacy or admin.
    dispensed = models.BooleanField(default=False)
    dispensed_at = models.DateTimeField(null=True, blank=True)
    dispensed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='dispensed_prescriptions'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.medicine_name} for {self.patient_id}"


class InventoryItem(models.Model):
    """Pharmacy stock.  "Low stock or expiring soon" is computed on read."""
    medicine_name = models.CharField(max_length=255, unique=True)
    quantity = models.IntegerField()
    expiry_date = models.DateField()
    price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    barcode = models.CharField(max_length=64, blank=True)
    alert_threshold = models.IntegerField(default=10)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.medicine_name} x{self.quantity}"


class DrugInteraction(models.Model):
    """Unordered drug pair; lookups must match either ordering."""
    SEVERITY_CHOICES = [
        ('low', 'Low'),
        ('moderate', 'Moderate'),
        ('high', 'High'),
    ]
    drug1 = models.CharField(max_length=255, db_index=True)
    drug2 = models.CharField(max_length=255, db_index=True)
    severity = models.CharField(max_length=16, choices=SEVERITY_CHOICES)
    description = models.TextField(blank=True)
    alternatives = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.drug1} + {self.drug2} ({self.severity})"


class NursingOrder(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('in_progress', 'In progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='nursing_orders')
    doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='nursing_orders'
    )
    medicine_name = models.CharField(max_length=255)
    injection_type = models.CharField(max_length=64)
    dosage = models.CharField(max_length=128)
    frequency = models.CharField(max_length=128)
    duration = models.PositiveIntegerField()
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='pending', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)


class UltrasoundOrder(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('in_progress', 'In progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='ultrasound_orders')
    doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='ultrasound_orders'
    )
    scan_type = models.CharField(max_length=128)
    report = models.TextField(blank=True)
    # Comma separated stored filenames under MEDIA_ROOT/ultrasound/.
    images = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='pending', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def image_list(self) -> list[str]:
        return [name for name in (self.images or '').split(',') if name]


class AdminNote(models.Model):
    """A message from any staff member to the administrators."""
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('normal', 'Normal'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    ]
    STATUS_CHOICES = [
        ('unread', 'Unread'),
        ('read', 'Read'),
    ]
    from_user = models.ForeignKey(User, null=True, on_delete=models.SET_NULL, related_name='admin_notes')
    from_user_role = models.CharField(max_length=16, choices=Role.choices)
    message = models.TextField()
    priority = models.CharField(max_length=16, choices=PRIORITY_CHOICES, default='normal')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='unread', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)


class ActivityLog(models.Model):
    """Immutable audit entry.  The user reference has no database
    constraint so that entries outlive the accounts they describe."""
    user = models.ForeignKey(
        User,
        null=True,
        blank=True,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='+',
    )
    username = models.CharField(max_length=150, blank=True)
    action = models.CharField(max_length=64)
    details = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='activity_action_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
