# core/management/commands/seed_clinic.py
from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction

from core.models import DrugInteraction, Role, User

# (username, name, role, shift); the administrator comes first so that a
# fresh database gives it id 1, the protected primary administrator.
DEFAULT_USERS = [
    ("admin", "System Administrator", Role.ADMIN, "Flexible"),
    ("doctor", "Doctor", Role.DOCTOR, "Morning (8am-3pm)"),
    ("reception", "Reception", Role.RECEPTION, "Morning (8am-3pm)"),
    ("lab", "Laboratory", Role.LAB, "Morning (8am-3pm)"),
    ("pharmacy", "Pharmacy", Role.PHARMACY, "Morning (8am-3pm)"),
    ("nurse", "Nursing", Role.NURSE, "Morning (8am-3pm)"),
    ("ultrasound", "Ultrasound", Role.ULTRASOUND, "Morning (8am-3pm)"),
]

DEFAULT_INTERACTIONS = [
    ("Warfarin", "Aspirin", "high", "Greatly increased bleeding risk", "Consult the physician immediately"),
    ("Warfarin", "Paracetamol", "moderate", "May increase the effect of warfarin", "Monitor INR"),
    ("Metformin", "Alcohol", "moderate", "May cause lactic acidosis", "Avoid alcohol"),
    ("ACE Inhibitors", "Potassium", "high", "Hyperkalaemia", "Avoid potassium supplements"),
]


class Command(BaseCommand):
    help = "Create the default staff accounts and drug interaction table (idempotent)."

    @transaction.atomic
    def handle(self, *args, **opts):
        for username, name, role, shift in DEFAULT_USERS:
            password = settings.DEFAULT_ADMIN_PASSWORD if role == Role.ADMIN else settings.DEFAULT_STAFF_PASSWORD
            user = User(username=username, name=name, role=role, shift=shift, is_staff=role == Role.ADMIN)
            user.set_password(password)
            u, created = User.objects.get_or_create(
                username=username,
                defaults={
                    "name": name, "role": role, "shift": shift,
                    "password": user.password, "is_staff": user.is_staff, "is_active": True,
                },
            )
            state = "created" if created else "exists"
            self.stdout.write(self.style.SUCCESS(f"{state}: {username} ({role}) id={u.id}"))

        for drug1, drug2, severity, description, alternatives in DEFAULT_INTERACTIONS:
            _, created = DrugInteraction.objects.get_or_create(
                drug1=drug1, drug2=drug2,
                defaults={"severity": severity, "description": description, "alternatives": alternatives},
            )
            if created:
                self.stdout.write(f"interaction: {drug1} + {drug2} ({severity})")

        self.stdout.write(self.style.SUCCESS("Clinic seed data ensured."))
        self.stdout.write(self.style.WARNING("Change the default passwords before going live."))
