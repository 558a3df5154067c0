import html

import bleach
from django.db import models
from rest_framework import serializers

from core.models import Patient


class CleanCharField(serializers.CharField):
    """CharField that strips markup from free text before it is stored."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        # bleach escapes the text it keeps; store it as typed.
        return html.unescape(bleach.clean(value, tags=set(), strip=True))


class ClinicModelSerializer(serializers.ModelSerializer):
    serializer_field_mapping = {
        **serializers.ModelSerializer.serializer_field_mapping,
        models.CharField: CleanCharField,
        models.TextField: CleanCharField,
    }


class PatientScopedMixin:
    """Take the patient from the URL when the body does not name one.

    Nested routes such as ``/api/patients/<id>/lab-tests`` pass the patient
    in the serializer context; flat routes require ``patient_id``.
    """

    def validate(self, attrs):
        attrs = super().validate(attrs)
        scoped = self.context.get('patient')
        if scoped is not None:
            attrs['patient'] = scoped
        elif self.instance is None and 'patient' not in attrs:
            raise serializers.ValidationError({'patient_id': ['This field is required.']})
        return attrs


def patient_field():
    return serializers.PrimaryKeyRelatedField(source='patient', queryset=Patient.objects.all(), required=False)


def display_name(source):
    return serializers.CharField(source=source, read_only=True, allow_null=True)
