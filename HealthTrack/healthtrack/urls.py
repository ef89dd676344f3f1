"""
URL configuration for the HealthTrack project.

The REST API lives under /api/, the browser portal under /portal/.
"""
from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from clients.views import ClientViewSet
from programs.views import EnrollmentViewSet, ProgramViewSet
from .views import health_check

router = DefaultRouter(trailing_slash=False)
router.register(r'clients', ClientViewSet, basename='client')
router.register(r'programs', ProgramViewSet, basename='program')
router.register(r'enrollments', EnrollmentViewSet, basename='enrollment')

urlpatterns = [
    path('', health_check, name='health-check'),
    path('admin/', admin.site.urls),
    path('api/', include(router.urls)),
    path('portal/', include('portal.urls')),
]
