from django.urls import path

from . import views

app_name = 'library'

urlpatterns = [
    path('', views.library_list, name='library-list'),
    path('<int:pk>/', views.library_detail, name='library-detail'),
    path('<int:pk>/approve/', views.library_approve, name='library-approve'),
]
