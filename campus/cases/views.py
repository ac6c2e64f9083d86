"""
API Views for cases.
Access decisions are taken by the permission evaluator inside CaseService.
"""
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from core.access.actors import Actor
from schoolcases_project.pagination import auto_paginate
from schoolcases_project.response_formatter import success_response

from .serializers import CaseFilterSerializer, CaseSerializer, CaseWriteSerializer
from .services import CaseService


@api_view(['GET', 'POST'])
@auto_paginate
def case_list(request):
    """
    List the cases visible to the caller or register a new one.

    GET /cases/
    - Filters: search, violence_type, status, priority, school_id (administrators)

    POST /cases/
    - Directors and teachers file into their own school
    - Administrators must provide ``school``
    """
    actor = Actor.from_user(request.user)

    if request.method == 'GET':
        filters = CaseFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        cases = CaseService.list_cases(actor, **filters.validated_data)
        serializer = CaseSerializer(cases, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    serializer = CaseWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    case = CaseService.create_case(actor, serializer.validated_data, request=request)
    return success_response(
        data=CaseSerializer(case).data,
        message=f"Case {case.case_number} created successfully",
        status_code=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def case_detail(request, pk):
    """
    Retrieve, update or soft delete a case.
    """
    actor = Actor.from_user(request.user)

    if request.method == 'GET':
        case = CaseService.get_case(actor, pk)
        return Response(CaseSerializer(case).data, status=status.HTTP_200_OK)

    if request.method in ['PUT', 'PATCH']:
        case = CaseService.get_case(actor, pk)
        serializer = CaseWriteSerializer(
            case,
            data=request.data,
            partial=request.method == 'PATCH'
        )
        serializer.is_valid(raise_exception=True)
        case = CaseService.update_case(actor, pk, serializer.validated_data, request=request)
        return success_response(
            data=CaseSerializer(case).data,
            message="Case updated successfully"
        )

    case = CaseService.delete_case(actor, pk, request=request)
    return success_response(message=f"Case {case.case_number} deleted successfully")
