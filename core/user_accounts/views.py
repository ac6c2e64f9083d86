"""
API Views for User Account management and authentication.
Provides REST API endpoints for registration, login, profile management, and user administration.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from core.access.actors import Actor
from schoolcases_project.pagination import auto_paginate
from schoolcases_project.response_formatter import error_response, success_response

from .serializers import (
    ChangePasswordSerializer,
    LoginSerializer,
    LogoutSerializer,
    PasswordResetSerializer,
    UserCreateSerializer,
    UserFilterSerializer,
    UserListSerializer,
    UserProfileSerializer,
    UserRegistrationSerializer,
    UserUpdateSerializer,
)
from .services import AuthService, UserService


def _token_payload(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token)
    }


# ============================================================================
# Public Authentication Views
# ============================================================================

@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """
    Public endpoint for user registration.
    Creates a new account with the USER role and returns JWT tokens.

    POST /auth/register/
    - Request body: { "email", "name", "phone_number", "password", "confirm_password" }
    - Returns: User data and JWT tokens
    """
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = AuthService.register(serializer.validated_data, request=request)

    return success_response(
        data={
            'user': UserProfileSerializer(user).data,
            'tokens': _token_payload(user),
        },
        message='User registered successfully',
        status_code=status.HTTP_201_CREATED
    )


@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """
    Public endpoint for user login.
    Authenticates user and returns JWT tokens. Every attempt is audited.

    POST /auth/login/
    - Request body: { "email": "...", "password": "..." }
    - Returns: User data and JWT tokens
    """
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = AuthService.login(
        request,
        serializer.validated_data['email'],
        serializer.validated_data['password'],
    )
    if user is None:
        return error_response(
            message='Invalid credentials',
            status_code=status.HTTP_401_UNAUTHORIZED
        )

    return success_response(
        data={
            'user': UserProfileSerializer(user).data,
            'tokens': _token_payload(user),
        },
        message='Login successful'
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """
    Authenticated endpoint for logout.
    Blacklists the refresh token.

    POST /auth/logout/
    - Request body: { "refresh": "..." }
    """
    serializer = LogoutSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        RefreshToken(serializer.validated_data['refresh']).blacklist()
    except TokenError as e:
        return error_response(message=str(e), status_code=status.HTTP_400_BAD_REQUEST)

    AuthService.logout(request.user, request=request)
    return success_response(message='Logout successful')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    """
    Authenticated endpoint for changing own password.

    POST /auth/change-password/
    - Request body: { "old_password", "new_password", "confirm_password" }
    """
    serializer = ChangePasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    AuthService.change_password(
        request.user,
        serializer.validated_data['old_password'],
        serializer.validated_data['new_password'],
        request=request,
    )
    return success_response(message='Password changed successfully')


# ============================================================================
# User Profile Views (Self-Management)
# ============================================================================

@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_profile(request):
    """
    View and update own profile.
    Role, school and email are read only here.

    GET /accounts/profile/
    PUT/PATCH /accounts/profile/
    - Request body: { "name", "phone_number", "department", "biography", "pfp_url" }
    """
    user = request.user

    if request.method == 'GET':
        return Response(UserProfileSerializer(user).data, status=status.HTTP_200_OK)

    serializer = UserProfileSerializer(user, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    user = UserService.update_profile(user, serializer.validated_data, request=request)
    return success_response(
        data=UserProfileSerializer(user).data,
        message='Profile updated successfully'
    )


# ============================================================================
# User Management Views
# ============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@auto_paginate
def user_list(request):
    """
    List the users visible to the caller or create a new account.

    GET /accounts/users/
    - Filters: search, role, school_id (administrators)

    POST /accounts/users/
    - Request body: UserCreateSerializer fields
    """
    actor = Actor.from_user(request.user)

    if request.method == 'GET':
        filters = UserFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        users = UserService.list_users(actor, **filters.validated_data)
        serializer = UserListSerializer(users, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    serializer = UserCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = UserService.create_user(actor, serializer.validated_data, request=request)
    return success_response(
        data=UserListSerializer(user).data,
        message='User created successfully',
        status_code=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, user_id):
    """
    View, update or soft delete one account.

    Role changes and school reassignments inside a PATCH are evaluated as
    their own actions.
    """
    actor = Actor.from_user(request.user)

    if request.method == 'GET':
        target = UserService.get_user(actor, user_id)
        return Response(UserListSerializer(target).data, status=status.HTTP_200_OK)

    if request.method in ['PUT', 'PATCH']:
        # Role and school changes are checked again per field by the service.
        target = UserService.get_editable(actor, user_id)
        serializer = UserUpdateSerializer(
            target,
            data=request.data,
            partial=request.method == 'PATCH'
        )
        serializer.is_valid(raise_exception=True)
        target = UserService.update_user(actor, user_id, serializer.validated_data, request=request)
        return success_response(
            data=UserListSerializer(target).data,
            message='User updated successfully'
        )

    target = UserService.delete_user(actor, user_id, request=request)
    return success_response(message=f'User {target.email} deleted successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def reset_password(request, user_id):
    """
    Set a temporary password for another account.

    POST /accounts/users/<id>/reset-password/
    - Request body: { "temporary_password" }
    """
    serializer = PasswordResetSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    target = UserService.reset_password(
        Actor.from_user(request.user),
        user_id,
        serializer.validated_data['temporary_password'],
        request=request,
    )
    return success_response(
        data={'id': target.id, 'email': target.email},
        message=f'Temporary password set successfully for {target.email}'
    )
