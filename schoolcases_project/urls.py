"""
URL configuration for schoolcases_project.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # Authentication endpoints (register, login, logout, password, tokens)
    path('auth/', include('core.user_accounts.auth_urls')),

    # Account management endpoints (profile, users)
    path('accounts/', include('core.user_accounts.urls')),

    path('schools/', include('campus.schools.urls')),
    path('cases/', include('campus.cases.urls')),
    path('library/', include('campus.library.urls')),
    path('audit-logs/', include('core.audit.urls')),
]
