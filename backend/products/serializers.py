from rest_framework import serializers

from core_backend.base import BaseModelSerializer, MoneyField
from .models import Category, Product


class CategorySerializer(BaseModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "description", "kind", "sort_order", "is_active"]


class ProductSerializer(BaseModelSerializer):
    """
    Product with its category's name and kitchen station. Write the category
    through `category_id`.
    """

    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        source="category",
        allow_null=True,
        required=False,
    )
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    kitchen_category = serializers.CharField(read_only=True)
    price = MoneyField(min_value=0)
    preparation_time = serializers.IntegerField(min_value=0, required=False)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "category_id",
            "category_name",
            "kitchen_category",
            "emoji",
            "preparation_time",
            "is_available",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]
        select_related_fields = ["category"]
