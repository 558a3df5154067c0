from rest_framework import serializers

from core.models import DrugInteraction, InventoryItem
from core.serializers.common import ClinicModelSerializer


class InventoryItemSerializer(ClinicModelSerializer):
    class Meta:
        model = InventoryItem
        fields = [
            'id', 'medicine_name', 'quantity', 'expiry_date', 'price', 'barcode',
            'alert_threshold', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            # Uniqueness surfaces as a Conflict from the store.
            'medicine_name': {'validators': []},
            'quantity': {'min_value': 0},
            'alert_threshold': {'min_value': 0},
            'price': {'min_value': 0},
        }


class InventoryAlertSerializer(InventoryItemSerializer):
    days_to_expiry = serializers.IntegerField(read_only=True)
    low_stock = serializers.BooleanField(read_only=True)
    expiring_soon = serializers.BooleanField(read_only=True)

    class Meta(InventoryItemSerializer.Meta):
        fields = InventoryItemSerializer.Meta.fields + ['days_to_expiry', 'low_stock', 'expiring_soon']


class DrugInteractionSerializer(ClinicModelSerializer):
    class Meta:
        model = DrugInteraction
        fields = ['id', 'drug1', 'drug2', 'severity', 'description', 'alternatives', 'created_at']
        read_only_fields = ['id', 'created_at']

    def validate(self, attrs):
        if attrs['drug1'].strip().casefold() == attrs['drug2'].strip().casefold():
            raise serializers.ValidationError({'drug2': ['Must differ from drug1.']})
        return attrs


class DrugListField(serializers.Field):
    """A list of drug names, given as a JSON list or a comma separated string."""

    default_error_messages = {
        'invalid': 'Expected a list of drug names or a comma separated string.',
    }

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = data.split(',')
        if not isinstance(data, (list, tuple)) or not all(isinstance(d, str) for d in data):
            self.fail('invalid')
        return list(data)

    def to_representation(self, value):
        return list(value)


class DrugCheckSerializer(serializers.Serializer):
    drugs = DrugListField(required=False, default=list)
