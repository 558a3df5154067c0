"""Notes from any staff member to the administrators."""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import AdminNote
from core.permissions import allow
from core.serializers.orders import AdminNoteSerializer, AdminNoteUpdateSerializer, StatusQuerySerializer
from core.services.events import publish_change
from core.store import get_store


@api_view(['GET', 'POST'])
@permission_classes([allow('notes.admin', POST='notes.create')])
def admin_notes(request):
    if request.method == 'GET':
        q = StatusQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = AdminNote.objects.select_related('from_user').order_by('-created_at', '-id')
        if q.validated_data.get('status'):
            qs = qs.filter(status=q.validated_data['status'])
        return Response(AdminNoteSerializer(qs, many=True).data)

    s = AdminNoteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    with get_store().write():
        note = s.save(from_user_id=request.user.id, from_user_role=request.user.role)
    data = AdminNoteSerializer(AdminNote.objects.select_related('from_user').get(pk=note.pk)).data
    publish_change(request.user, 'admin_note_created', 'admin_note_added', data, {'id': note.id, 'priority': note.priority})
    return Response({'ok': True, 'note': data}, status=status.HTTP_201_CREATED)


@api_view(['PUT'])
@permission_classes([allow('notes.admin')])
def admin_note_detail(request, pk: int):
    note = get_object_or_404(AdminNote, pk=pk)
    s = AdminNoteUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    with get_store().write():
        note.status = s.validated_data['status']
        note.save(update_fields=['status'])
    payload = {'id': note.id, 'status': note.status}
    publish_change(request.user, 'admin_note_updated', 'admin_note_updated', payload, payload)
    return Response({'ok': True, 'note': payload})
