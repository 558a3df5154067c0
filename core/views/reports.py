"""Dashboard statistics and the administrators' activity log."""
from __future__ import annotations

from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.permissions import allow
from core.services.statistics import clinic_statistics, recent_activity


class ActivityQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=500, default=100)


@api_view(['GET'])
@permission_classes([allow('statistics.read')])
def statistics(request):
    return Response(clinic_statistics())


@api_view(['GET'])
@permission_classes([allow('activity.read')])
def activity_log(request):
    q = ActivityQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response(recent_activity(q.validated_data['limit']))
