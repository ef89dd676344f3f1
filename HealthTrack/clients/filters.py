import django_filters
from .models import Client

class ClientFilter(django_filters.FilterSet):
    """Filter clients by gender and age range"""
    gender = django_filters.CharFilter(lookup_expr='iexact')
    min_age = django_filters.NumberFilter(field_name='age', lookup_expr='gte')
    max_age = django_filters.NumberFilter(field_name='age', lookup_expr='lte')

    class Meta:
        model = Client
        fields = ["gender", "min_age", "max_age"]
