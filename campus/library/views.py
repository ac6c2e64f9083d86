"""
API Views for the shared library.
"""
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from core.access.actors import Actor
from schoolcases_project.pagination import auto_paginate
from schoolcases_project.response_formatter import success_response

from .serializers import (
    LibraryItemCreateSerializer,
    LibraryItemSerializer,
    LibraryItemUpdateSerializer,
)
from .services import LibraryService


@api_view(['GET', 'POST'])
@auto_paginate
def library_list(request):
    """
    List the items visible to the caller or register an upload.

    GET /library/
    - Filters: search; visibility and pending=true for administrators

    POST /library/
    - Administrators and directors
    """
    actor = Actor.from_user(request.user)

    if request.method == 'GET':
        items = LibraryService.list_items(
            actor,
            search=request.query_params.get('search'),
            visibility=request.query_params.get('visibility'),
            pending_only=request.query_params.get('pending', 'false').lower() == 'true',
        )
        serializer = LibraryItemSerializer(items, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    serializer = LibraryItemCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    item = LibraryService.create_item(actor, serializer.validated_data, request=request)

    message = "File uploaded successfully"
    if not item.is_approved:
        message = "File uploaded successfully. It will be visible to other schools once approved"
    return success_response(
        data=LibraryItemSerializer(item).data,
        message=message,
        status_code=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def library_detail(request, pk):
    """
    Retrieve, edit or soft delete an item.
    """
    actor = Actor.from_user(request.user)

    if request.method == 'GET':
        item = LibraryService.get_item(actor, pk)
        return Response(LibraryItemSerializer(item).data, status=status.HTTP_200_OK)

    if request.method in ['PUT', 'PATCH']:
        serializer = LibraryItemUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        item = LibraryService.update_item(actor, pk, serializer.validated_data, request=request)
        return success_response(
            data=LibraryItemSerializer(item).data,
            message="Item updated successfully"
        )

    LibraryService.delete_item(actor, pk, request=request)
    return success_response(message="Item deleted successfully")


@api_view(['POST'])
def library_approve(request, pk):
    """
    Approve a public item so every school can see it. Administrators only.

    POST /library/<id>/approve/
    """
    item = LibraryService.approve_item(Actor.from_user(request.user), pk, request=request)
    return success_response(
        data=LibraryItemSerializer(item).data,
        message="Item approved successfully"
    )
