"""Dashboard figures, read through the store's raw SQL interface."""
from __future__ import annotations

from decimal import Decimal

from django.db import connection

from core.models import (
    ActivityLog, Appointment, LabTest, MedicalRecord, Patient, Payment, Prescription, User,
)
from core.store import Store, get_store


def _table(model) -> str:
    return connection.ops.quote_name(model._meta.db_table)


def clinic_statistics(store: Store | None = None) -> dict:
    store = store or get_store()
    totals = store.fetch_one(
        f"""
        SELECT
            (SELECT COUNT(*) FROM {_table(Patient)}) AS total_patients,
            (SELECT COUNT(*) FROM {_table(LabTest)}) AS total_tests,
            (SELECT COUNT(*) FROM {_table(LabTest)} WHERE status = %s) AS pending_tests,
            (SELECT COUNT(*) FROM {_table(Prescription)} WHERE status = %s) AS active_prescriptions,
            (SELECT COUNT(*) FROM {_table(User)} WHERE is_active = %s) AS active_users,
            (SELECT COUNT(*) FROM {_table(Appointment)}) AS total_appointments,
            (SELECT COALESCE(SUM(amount), 0) FROM {_table(Payment)}) AS total_payments
        """,
        ['pending', 'active', True],
    ) or {}
    age_groups = store.fetch_all(
        f"""
        SELECT age_group, COUNT(*) AS count FROM (
            SELECT CASE
                WHEN age < 13 THEN '0-12'
                WHEN age BETWEEN 13 AND 60 THEN '13-60'
                ELSE '60+'
            END AS age_group
            FROM {_table(Patient)}
        ) grouped
        GROUP BY age_group
        ORDER BY age_group
        """
    )
    top_diagnoses = store.fetch_all(
        f"""
        SELECT diagnosis, COUNT(*) AS count
        FROM {_table(MedicalRecord)}
        WHERE diagnosis IS NOT NULL AND diagnosis != ''
        GROUP BY diagnosis
        ORDER BY count DESC, diagnosis
        LIMIT 10
        """
    )
    totals['total_payments'] = str(Decimal(str(totals.get('total_payments') or 0)).quantize(Decimal('0.01')))
    return {**totals, 'age_groups': age_groups, 'top_diagnoses': top_diagnoses}


def recent_activity(limit: int, store: Store | None = None) -> list[dict]:
    store = store or get_store()
    return store.fetch_all(
        f"""
        SELECT a.id, a.user_id, a.username, a.action, a.details, a.created_at,
               u.name AS user_name, u.role AS user_role
        FROM {_table(ActivityLog)} a
        LEFT JOIN {_table(User)} u ON u.id = a.user_id
        ORDER BY a.created_at DESC, a.id DESC
        LIMIT %s
        """,
        [limit],
    )
