"""
Pharmacy endpoints: stock, stock alerts and the drug interaction table.

Stock alerts are never stored; they are computed from the current date
on every read.
"""
from __future__ import annotations

from django.http import QueryDict
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import DrugInteraction, InventoryItem
from core.permissions import allow
from core.serializers.inventory import (
    DrugCheckSerializer,
    DrugInteractionSerializer,
    InventoryAlertSerializer,
    InventoryItemSerializer,
)
from core.services.events import publish_change
from core.services.interactions import find_interactions, normalize_drugs
from core.services.inventory import inventory_alerts
from core.store import get_store


@api_view(['GET', 'POST'])
@permission_classes([allow('inventory.read', POST='inventory.write')])
def inventory(request):
    if request.method == 'GET':
        items = InventoryItem.objects.order_by('medicine_name')
        return Response({
            'inventory': InventoryItemSerializer(items, many=True).data,
            'alerts': InventoryAlertSerializer(inventory_alerts(), many=True).data,
        })

    s = InventoryItemSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    with get_store().write():
        item = s.save()
    data = InventoryItemSerializer(item).data
    publish_change(request.user, 'inventory_created', 'inventory_added', data, {'id': item.id, 'medicine': item.medicine_name})
    return Response({'ok': True, 'item': data}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([allow('inventory.read')])
def inventory_low_stock(request):
    return Response(InventoryAlertSerializer(inventory_alerts(), many=True).data)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([allow('inventory.read', PUT='inventory.write', DELETE='destructive')])
def inventory_detail(request, pk: int):
    item = get_object_or_404(InventoryItem, pk=pk)
    if request.method == 'GET':
        return Response(InventoryItemSerializer(item).data)

    if request.method == 'PUT':
        s = InventoryItemSerializer(item, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        with get_store().write():
            item = s.save()
        data = InventoryItemSerializer(item).data
        publish_change(request.user, 'inventory_updated', 'inventory_updated', data, {'id': pk, 'quantity': item.quantity})
        return Response({'ok': True, 'item': data})

    with get_store().write():
        item.delete()
    publish_change(request.user, 'inventory_deleted', 'inventory_deleted', {'id': pk}, {'id': pk, 'medicine': item.medicine_name})
    return Response({'ok': True})


@api_view(['GET', 'POST'])
@permission_classes([allow('interactions.read', POST='interactions.write')])
def drug_interactions(request):
    if request.method == 'GET':
        qs = DrugInteraction.objects.order_by('drug1', 'drug2')
        return Response(DrugInteractionSerializer(qs, many=True).data)

    s = DrugInteractionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    with get_store().write():
        interaction = s.save()
    data = DrugInteractionSerializer(interaction).data
    publish_change(
        request.user, 'drug_interaction_created', 'drug_interaction_added', data,
        {'id': interaction.id, 'drugs': [interaction.drug1, interaction.drug2]},
    )
    return Response({'ok': True, 'interaction': data}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([allow('interactions.read')])
def drug_interactions_check(request):
    """Interactions among the given drugs: ``?drugs=a,b`` or ``{"drugs": [...]}``."""
    source = request.query_params if request.method == 'GET' else request.data
    if isinstance(source, QueryDict):
        # Form and query input may repeat the field: ?drugs=a&drugs=b
        values = source.getlist('drugs')
        drugs = values[0] if len(values) == 1 else values
    else:
        drugs = source.get('drugs', [])
    s = DrugCheckSerializer(data={'drugs': drugs})
    s.is_valid(raise_exception=True)
    drugs = normalize_drugs(s.validated_data['drugs'])
    found = find_interactions(drugs)
    return Response({
        'drugs': drugs,
        'interactions': DrugInteractionSerializer(found, many=True).data,
    })
