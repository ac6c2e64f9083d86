"""
API Views for schools.
Every decision is taken by SchoolService; the views only validate input and
shape responses.
"""
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from core.access.actors import Actor
from schoolcases_project.pagination import auto_paginate
from schoolcases_project.response_formatter import success_response

from .serializers import SchoolSerializer, SchoolWriteSerializer
from .services import SchoolService


@api_view(['GET', 'POST'])
@auto_paginate
def school_list(request):
    """
    List the schools visible to the caller or create a new one.

    GET /schools/
    - Filters: search (name, code, district), type

    POST /schools/
    - Administrators only
    """
    actor = Actor.from_user(request.user)

    if request.method == 'GET':
        schools = SchoolService.list_schools(
            actor,
            search=request.query_params.get('search'),
            school_type=request.query_params.get('type'),
        )
        serializer = SchoolSerializer(schools, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    serializer = SchoolWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    school = SchoolService.create_school(actor, serializer.validated_data, request=request)
    return success_response(
        data=SchoolSerializer(school).data,
        message="School created successfully",
        status_code=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def school_detail(request, pk):
    """
    Retrieve, update or soft delete a school.

    DELETE is refused while active users are still assigned to the school.
    """
    actor = Actor.from_user(request.user)

    if request.method == 'GET':
        school = SchoolService.get_school(actor, pk)
        return Response(SchoolSerializer(school).data, status=status.HTTP_200_OK)

    if request.method in ['PUT', 'PATCH']:
        school = SchoolService.get_school(actor, pk)
        serializer = SchoolWriteSerializer(
            school,
            data=request.data,
            partial=request.method == 'PATCH'
        )
        serializer.is_valid(raise_exception=True)
        school = SchoolService.update_school(actor, pk, serializer.validated_data, request=request)
        return success_response(
            data=SchoolSerializer(school).data,
            message="School updated successfully"
        )

    school = SchoolService.delete_school(actor, pk, request=request)
    return success_response(message=f"School {school.name} deleted successfully")
