from rest_framework import serializers

from core.models import Patient
from core.serializers.common import ClinicModelSerializer


class PatientSerializer(ClinicModelSerializer):
    class Meta:
        model = Patient
        fields = [
            'id', 'name', 'phone', 'age', 'gender', 'blood_type', 'national_id', 'address',
            'allergies', 'chronic_diseases', 'previous_surgeries', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'name': {'allow_blank': False},
            'phone': {'allow_blank': False},
            'age': {'max_value': 150},
        }


class PatientListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, max_length=100)
