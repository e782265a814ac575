import django_filters
from django_filters.constants import EMPTY_VALUES

from modules.core.exceptions import ValidationFailed
from modules.products.models import Product


class ProductFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    category = django_filters.UUIDFilter(field_name="category_id")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    active = django_filters.BooleanFilter(field_name="is_active")

    class Meta:
        model = Product
        fields = ["name", "category", "min_price", "max_price", "active"]

    def lookups(self) -> dict:
        """ORM lookups of the declared filters that received a value.

        The repository applies them to its own queryset, so listing never
        goes through ``self.qs``.

        Raises:
            ValidationFailed: if any parameter does not validate.
        """
        if not self.is_valid():
            raise ValidationFailed(self.errors.as_text())

        lookups = {}
        for param, declared in self.filters.items():
            value = self.form.cleaned_data.get(param)
            if value in EMPTY_VALUES:
                continue
            key = (
                declared.field_name
                if declared.lookup_expr == "exact"
                else f"{declared.field_name}__{declared.lookup_expr}"
            )
            lookups[key] = value
        return lookups
