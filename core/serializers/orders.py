"""Department work queues: nursing and ultrasound orders, admin notes."""
from rest_framework import serializers

from core.models import AdminNote, NursingOrder, UltrasoundOrder
from core.serializers.common import (
    CleanCharField, ClinicModelSerializer, PatientScopedMixin, display_name, patient_field,
)


class NursingOrderSerializer(PatientScopedMixin, ClinicModelSerializer):
    patient_id = patient_field()
    patient_name = display_name('patient.name')
    doctor_id = serializers.IntegerField(read_only=True)
    doctor_name = display_name('doctor.name')

    class Meta:
        model = NursingOrder
        fields = [
            'id', 'patient_id', 'patient_name', 'doctor_id', 'doctor_name', 'medicine_name',
            'injection_type', 'dosage', 'frequency', 'duration', 'notes', 'status',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'status', 'created_at', 'updated_at']
        extra_kwargs = {'duration': {'min_value': 1}}


class NursingOrderUpdateSerializer(ClinicModelSerializer):
    class Meta:
        model = NursingOrder
        fields = ['status', 'notes']


class UltrasoundOrderSerializer(PatientScopedMixin, ClinicModelSerializer):
    patient_id = patient_field()
    patient_name = display_name('patient.name')
    doctor_id = serializers.IntegerField(read_only=True)
    doctor_name = display_name('doctor.name')
    images = serializers.ListField(source='image_list', child=serializers.CharField(), read_only=True)
    # Request notes are kept as the initial report text.
    notes = CleanCharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = UltrasoundOrder
        fields = [
            'id', 'patient_id', 'patient_name', 'doctor_id', 'doctor_name', 'scan_type',
            'report', 'notes', 'images', 'status', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'report', 'status', 'created_at', 'updated_at']

    def validate(self, attrs):
        attrs = super().validate(attrs)
        notes = attrs.pop('notes', None)
        if notes:
            attrs['report'] = notes
        return attrs


class UltrasoundOrderUpdateSerializer(ClinicModelSerializer):
    class Meta:
        model = UltrasoundOrder
        fields = ['status', 'report']


class AdminNoteSerializer(ClinicModelSerializer):
    from_user_id = serializers.IntegerField(read_only=True)
    from_user_name = display_name('from_user.name')

    class Meta:
        model = AdminNote
        fields = ['id', 'from_user_id', 'from_user_name', 'from_user_role', 'message', 'priority', 'status', 'created_at']
        read_only_fields = ['id', 'from_user_role', 'status', 'created_at']
        extra_kwargs = {'message': {'allow_blank': False}}


class AdminNoteUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AdminNote.STATUS_CHOICES, default='read')


class StatusQuerySerializer(serializers.Serializer):
    status = serializers.CharField(required=False, max_length=16)
