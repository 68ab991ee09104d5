import django_filters
from django.db.models import Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Query-string filters for the product list"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    type = django_filters.ChoiceFilter(choices=Product.TYPE_CHOICES)
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    active_only = django_filters.CharFilter(method='filter_active_only', label='Active only')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')

    class Meta:
        model = Product
        fields = ['search', 'type', 'category', 'active_only', 'min_price', 'max_price']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(description__icontains=value) |
            Q(category__icontains=value)
        )

    def filter_active_only(self, queryset, name, value):
        if str(value).lower() in ('1', 'true', 'yes'):
            return queryset.filter(is_active=True)
        return queryset
