"""Serializers for doctor-authored records: notes, lab tests, prescriptions."""
from rest_framework import serializers

from core.models import LabTest, MedicalRecord, Prescription, TestStatistic
from core.serializers.common import ClinicModelSerializer, PatientScopedMixin, display_name, patient_field


class MedicalRecordSerializer(ClinicModelSerializer):
    doctor_id = serializers.IntegerField(read_only=True)
    doctor_name = display_name('doctor.name')

    class Meta:
        model = MedicalRecord
        fields = ['id', 'patient_id', 'doctor_id', 'doctor_name', 'symptoms', 'diagnosis', 'treatment', 'created_at']
        read_only_fields = ['id', 'patient_id', 'created_at']

    def validate(self, attrs):
        if not any(attrs.get(f) for f in ('symptoms', 'diagnosis', 'treatment')):
            raise serializers.ValidationError('A medical record needs symptoms, a diagnosis or a treatment.')
        return attrs


def split_test_names(raw: str) -> list[str]:
    return [name.strip() for name in (raw or '').split(',') if name.strip()]


class LabTestSerializer(PatientScopedMixin, ClinicModelSerializer):
    patient_id = patient_field()
    patient_name = display_name('patient.name')
    doctor_id = serializers.IntegerField(read_only=True)
    doctor_name = display_name('doctor.name')

    class Meta:
        model = LabTest
        fields = [
            'id', 'patient_id', 'patient_name', 'doctor_id', 'doctor_name', 'test_names',
            'results', 'notes', 'status', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'results', 'status', 'created_at', 'updated_at']

    def validate_test_names(self, value):
        names = split_test_names(value)
        if not names:
            raise serializers.ValidationError('At least one test name is required.')
        return ', '.join(names)


class LabTestResultSerializer(ClinicModelSerializer):
    class Meta:
        model = LabTest
        fields = ['status', 'results', 'notes']


class LabTestListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=LabTest.STATUS_CHOICES, required=False)


class TestStatisticSerializer(serializers.ModelSerializer):
    class Meta:
        model = TestStatistic
        fields = ['test_name', 'count']


class PrescriptionSerializer(PatientScopedMixin, ClinicModelSerializer):
    patient_id = patient_field()
    patient_name = display_name('patient.name')
    doctor_id = serializers.IntegerField(read_only=True)
    doctor_name = display_name('doctor.name')
    dispensed_by_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Prescription
        fields = [
            'id', 'patient_id', 'patient_name', 'doctor_id', 'doctor_name', 'medicine_name',
            'dosage', 'frequency', 'duration', 'timing', 'notes', 'status', 'dispensed',
            'dispensed_at', 'dispensed_by_id', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'status', 'dispensed', 'dispensed_at', 'created_at', 'updated_at']
        extra_kwargs = {'duration': {'min_value': 1}}


class PrescriptionUpdateSerializer(ClinicModelSerializer):
    class Meta:
        model = Prescription
        fields = ['status', 'notes', 'dispensed']
