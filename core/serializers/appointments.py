from rest_framework import serializers

from core.models import Appointment, Role, User
from core.serializers.common import ClinicModelSerializer, PatientScopedMixin, display_name, patient_field


class AppointmentSerializer(PatientScopedMixin, ClinicModelSerializer):
    patient_id = patient_field()
    doctor_id = serializers.PrimaryKeyRelatedField(
        source='doctor',
        queryset=User.objects.filter(role=Role.DOCTOR),
        required=False,
        allow_null=True,
    )
    patient_name = display_name('patient.name')
    doctor_name = display_name('doctor.name')

    class Meta:
        model = Appointment
        fields = [
            'id', 'patient_id', 'patient_name', 'doctor_id', 'doctor_name',
            'appointment_date', 'appointment_time', 'status', 'notes', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class AppointmentListQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=Appointment.STATUS_CHOICES, required=False)
    doctor_id = serializers.IntegerField(required=False, min_value=1)
