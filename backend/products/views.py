from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import BaseViewSet
from .models import Category, Product
from .serializers import CategorySerializer, ProductSerializer
from .services import CategoryService, ProductService

logger = logging.getLogger(__name__)


class CategoryViewSet(BaseViewSet):
    """
    Catalogue categories. Archived categories are hidden from the list unless
    `?include_archived=true` is passed; DELETE archives instead of removing.
    """

    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    filterset_fields = ["kind"]
    ordering = ["sort_order", "name"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == "list" and self.request.query_params.get("include_archived") != "true":
            queryset = queryset.filter(is_active=True)
        return queryset

    def get_object(self):
        obj = CategoryService.get_category(self.kwargs["pk"])
        self.check_object_permissions(self.request, obj)
        return obj

    def perform_create(self, serializer):
        category = serializer.save()
        logger.info(f"Category '{category.name}' created ({category.kind})")

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        CategoryService.archive_category(kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProductViewSet(BaseViewSet):
    """
    Products ordered by category, then name. DELETE marks the product
    unavailable; order items keep pointing at it.
    """

    queryset = Product.objects.all()
    serializer_class = ProductSerializer
    filterset_fields = ["category", "is_available"]
    ordering_fields = ["name", "price"]
    ordering = ["category__sort_order", "name"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_object(self):
        obj = ProductService.get_product(self.kwargs["pk"])
        self.check_object_permissions(self.request, obj)
        return obj

    def perform_create(self, serializer):
        product = serializer.save()
        logger.info(f"Product '{product.name}' created at {product.price}")

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        ProductService.archive_product(kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def available(self, request: Request) -> Response:
        """What a POS can add to an order right now."""
        products = ProductService.available_products()
        category = request.query_params.get("category")
        if category:
            products = products.filter(category_id=CategoryService.get_category(category).pk)
        return Response(self.get_serializer(products, many=True).data)

    @action(detail=True, methods=["post"])
    def availability(self, request: Request, pk=None) -> Response:
        product = ProductService.toggle_availability(pk)
        return Response(self.get_serializer(product).data)
