from django.urls import path
from . import views

app_name = 'portal'

urlpatterns = [
    path('', views.dashboard, name='dashboard'),
    path('programs/', views.program_list, name='program-list'),
    path('programs/new/', views.program_form, name='program-create'),
    path('programs/<str:program_id>/', views.program_detail, name='program-detail'),
    path('programs/<str:program_id>/edit/', views.program_form, name='program-edit'),
    path('programs/<str:program_id>/delete/', views.program_delete, name='program-delete'),
    path('clients/', views.client_list, name='client-list'),
    path('clients/new/', views.client_form, name='client-create'),
    path('search/', views.client_search, name='client-search'),
    path('clients/<str:client_id>/', views.client_detail, name='client-detail'),
    path('clients/<str:client_id>/edit/', views.client_form, name='client-edit'),
    path('clients/<str:client_id>/delete/', views.client_delete, name='client-delete'),
    path('clients/<str:client_id>/enroll/', views.enroll_client, name='client-enroll'),
    path(
        'clients/<str:client_id>/programs/<str:program_id>/remove/',
        views.unenroll,
        name='unenroll',
    ),
]
