# apps/accounts/filters.py
import django_filters
from .models import Role

# 역할 검색 필터
class RoleFilter(django_filters.FilterSet):
    is_active = django_filters.BooleanFilter(field_name="is_active")
    is_system = django_filters.BooleanFilter(field_name="is_system")

    class Meta:
        model = Role
        fields = ["is_active", "is_system"]
