"""
URL mappings for the clinic API.

Paths carry no trailing slash, matching the dashboard front-end.
"""
from django.urls import path

from .auth_views import login_view
from .views import admin_notes, appointments, clinical, health, orders, patients, payments, pharmacy, reports, users

urlpatterns = [
    path('health', health.health, name='health'),
    # Authentication
    path('api/auth/login', login_view, name='login'),
    # Users
    path('api/users', users.users, name='users'),
    path('api/users/<int:pk>', users.user_detail, name='user-detail'),
    path('api/users/<int:pk>/toggle-active', users.user_toggle_active, name='user-toggle-active'),
    path('api/users/<int:pk>/change-password', users.user_change_password, name='user-change-password'),
    # Patients
    path('api/patients', patients.patients, name='patients'),
    path('api/patients/<int:pk>', patients.patient_detail, name='patient-detail'),
    path('api/patients/<int:pk>/medical-records', clinical.medical_records, name='patient-medical-records'),
    path('api/patients/<int:pk>/lab-tests', clinical.patient_lab_tests, name='patient-lab-tests'),
    path('api/patients/<int:pk>/prescriptions', clinical.patient_prescriptions, name='patient-prescriptions'),
    # Appointments & payments
    path('api/appointments', appointments.appointments, name='appointments'),
    path('api/appointments/<int:pk>', appointments.appointment_detail, name='appointment-detail'),
    path('api/payments', payments.payments, name='payments'),
    # Laboratory
    path('api/lab-tests', clinical.lab_tests, name='lab-tests'),
    path('api/lab-tests/<int:pk>', clinical.lab_test_detail, name='lab-test-detail'),
    path('api/test-statistics', clinical.test_statistics, name='test-statistics'),
    # Prescriptions
    path('api/prescriptions', clinical.prescriptions, name='prescriptions'),
    path('api/prescriptions/<int:pk>', clinical.prescription_detail, name='prescription-detail'),
    path('api/prescriptions/<int:pk>/dispense', clinical.prescription_dispense, name='prescription-dispense'),
    # Pharmacy
    path('api/inventory', pharmacy.inventory, name='inventory'),
    path('api/inventory/low-stock', pharmacy.inventory_low_stock, name='inventory-low-stock'),
    path('api/inventory/<int:pk>', pharmacy.inventory_detail, name='inventory-detail'),
    path('api/drug-interactions', pharmacy.drug_interactions, name='drug-interactions'),
    path('api/drug-interactions/check', pharmacy.drug_interactions_check, name='drug-interactions-check'),
    # Nursing & ultrasound
    path('api/nursing-orders', orders.nursing_orders, name='nursing-orders'),
    path('api/nursing-orders/pending', orders.nursing_orders_pending, name='nursing-orders-pending'),
    path('api/nursing-orders/<int:pk>', orders.nursing_order_detail, name='nursing-order-detail'),
    path('api/ultrasound-orders', orders.ultrasound_orders, name='ultrasound-orders'),
    path('api/ultrasound-orders/pending', orders.ultrasound_orders_pending, name='ultrasound-orders-pending'),
    path('api/ultrasound-orders/<int:pk>', orders.ultrasound_order_detail, name='ultrasound-order-detail'),
    path('api/ultrasound-orders/<int:pk>/upload', orders.ultrasound_order_upload, name='ultrasound-order-upload'),
    # Administration
    path('api/admin-notes', admin_notes.admin_notes, name='admin-notes'),
    path('api/admin-notes/<int:pk>', admin_notes.admin_note_detail, name='admin-note-detail'),
    path('api/statistics', reports.statistics, name='statistics'),
    path('api/activity-log', reports.activity_log, name='activity-log'),
]
