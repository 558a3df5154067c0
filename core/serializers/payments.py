from decimal import Decimal

from core.models import Payment
from core.serializers.common import ClinicModelSerializer, PatientScopedMixin, display_name, patient_field


class PaymentSerializer(PatientScopedMixin, ClinicModelSerializer):
    patient_id = patient_field()
    patient_name = display_name('patient.name')

    class Meta:
        model = Payment
        fields = [
            'id', 'patient_id', 'patient_name', 'amount', 'payment_method', 'payment_status',
            'qr_code', 'reference', 'notes', 'created_at',
        ]
        read_only_fields = ['id', 'payment_status', 'qr_code', 'reference', 'created_at']
        extra_kwargs = {
            'amount': {'min_value': Decimal('0.01')},
        }
