"""
Audit trail endpoint. Read only: entries are never edited through the API.
"""
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from core.access.actors import Actor
from core.access.constants import Action, EntityType, normalize_entity_type
from core.access.decorators import require_action
from core.access.filters import apply_scope
from schoolcases_project.pagination import auto_paginate

from .models import AuditLog
from .serializers import AuditLogFilterSerializer, AuditLogSerializer


@api_view(['GET'])
@require_action(EntityType.AUDIT_LOG, Action.VIEW)
@auto_paginate
def audit_log_list(request):
    """
    List audit entries, newest first. Administrators only.

    GET /audit-logs/
    - Filters: action (contains), entity_type, entity_id, user_id,
      start_date, end_date, search
    """
    filters = AuditLogFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)
    params = filters.validated_data

    logs = apply_scope(
        AuditLog.objects.select_related('user'),
        Actor.from_user(request.user),
        EntityType.AUDIT_LOG,
    )

    if params.get('action'):
        logs = logs.filter(action__icontains=params['action'])
    if params.get('entity_type'):
        logs = logs.filter(entity_type=normalize_entity_type(params['entity_type']))
    if params.get('entity_id'):
        logs = logs.filter(entity_id=params['entity_id'])
    if params.get('user_id'):
        logs = logs.filter(user_id=params['user_id'])
    if params.get('start_date'):
        logs = logs.filter(created_at__gte=params['start_date'])
    if params.get('end_date'):
        logs = logs.filter(created_at__lte=params['end_date'])

    logs = logs.search(params.get('search'))

    serializer = AuditLogSerializer(logs, many=True)
    return Response(serializer.data, status=status.HTTP_200_OK)
