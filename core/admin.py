"""
Django admin registrations for the clinic models.

Superusers can inspect records through ``/admin/``.  The activity log is
registered read-only since entries are never edited.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
    ActivityLog,
    AdminNote,
    Appointment,
    DrugInteraction,
    InventoryItem,
    LabTest,
    MedicalRecord,
    NursingOrder,
    Patient,
    Payment,
    Prescription,
    TestStatistic,
    UltrasoundOrder,
    User,
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('id', 'username', 'name', 'role', 'shift', 'is_active')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'name', 'phone')
    fieldsets = BaseUserAdmin.fieldsets + (('Clinic', {'fields': ('name', 'role', 'shift', 'phone')}),)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'phone', 'age', 'gender', 'created_at')
    search_fields = ('name', 'phone', 'national_id')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'appointment_date', 'appointment_time', 'status')
    list_filter = ('status', 'appointment_date')


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'amount', 'payment_method', 'payment_status', 'created_at')
    list_filter = ('payment_method',)
    exclude = ('qr_code',)


@admin.register(LabTest)
class LabTestAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'test_names', 'status', 'created_at')
    list_filter = ('status',)


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'medicine_name', 'status', 'dispensed')
    list_filter = ('status', 'dispensed')


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ('medicine_name', 'quantity', 'alert_threshold', 'expiry_date', 'price')
    search_fields = ('medicine_name', 'barcode')


@admin.register(DrugInteraction)
class DrugInteractionAdmin(admin.ModelAdmin):
    list_display = ('drug1', 'drug2', 'severity')
    list_filter = ('severity',)


@admin.register(NursingOrder, UltrasoundOrder)
class DepartmentOrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'status', 'created_at')
    list_filter = ('status',)


@admin.register(AdminNote)
class AdminNoteAdmin(admin.ModelAdmin):
    list_display = ('id', 'from_user', 'from_user_role', 'priority', 'status', 'created_at')
    list_filter = ('status', 'priority')


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'username', 'action')
    list_filter = ('action',)
    search_fields = ('username', 'details')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


admin.site.register(MedicalRecord)
admin.site.register(TestStatistic)
