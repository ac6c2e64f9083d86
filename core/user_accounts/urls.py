"""
URL Configuration for Accounts app.
Handles user account management functionality (not authentication).
Authentication endpoints are in auth_urls.py
"""
from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # Own profile
    path('profile/', views.user_profile, name='user_profile'),
    # User management (scoped by the permission evaluator)
    path('users/', views.user_list, name='user_list'),
    path('users/<int:user_id>/', views.user_detail, name='user_detail'),
    path('users/<int:user_id>/reset-password/', views.reset_password, name='reset_password'),
]
