import django_filters
from .models import Enrollment

class EnrollmentFilter(django_filters.FilterSet):
    """Filter enrollments by client or program"""
    client = django_filters.UUIDFilter(field_name='client_id')
    program = django_filters.UUIDFilter(field_name='program_id')

    class Meta:
        model = Enrollment
        fields = ["client", "program"]
