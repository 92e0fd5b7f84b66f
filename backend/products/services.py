from django.db import transaction
import logging

from core_backend.exceptions import CategoryNotFound, ProductNotFound
from .models import Category, Product

logger = logging.getLogger(__name__)


class CategoryService:
    """Catalogue categories. Removal is a soft delete so past orders keep their history."""

    @staticmethod
    def get_category(category_id, for_update: bool = False) -> Category:
        queryset = Category.objects.select_for_update() if for_update else Category.objects.all()
        try:
            return queryset.get(pk=category_id)
        except (Category.DoesNotExist, ValueError, TypeError):
            raise CategoryNotFound(category_id)

    @staticmethod
    def active_categories():
        return Category.objects.filter(is_active=True).order_by("sort_order", "name")

    @staticmethod
    @transaction.atomic
    def archive_category(category_id) -> Category:
        """Hides the category from listings. Its products stay orderable."""
        category = CategoryService.get_category(category_id, for_update=True)
        if category.is_active:
            category.is_active = False
            category.save(update_fields=["is_active"])
            logger.info(f"Category '{category.name}' archived")
        return category


class ProductService:
    """Price catalogue consumed by order item creation."""

    @staticmethod
    def get_product(product_id, for_update: bool = False) -> Product:
        queryset = Product.objects.select_for_update() if for_update else Product.objects.all()
        try:
            return queryset.get(pk=product_id)
        except (Product.DoesNotExist, ValueError, TypeError):
            raise ProductNotFound(product_id)

    @staticmethod
    def available_products():
        return (
            Product.objects.filter(is_available=True)
            .select_related("category")
            .order_by("category__sort_order", "name")
        )

    @staticmethod
    @transaction.atomic
    def toggle_availability(product_id) -> Product:
        """
        Flips whether the product can be added to orders. Items already on
        orders are unaffected.
        """
        product = ProductService.get_product(product_id, for_update=True)
        product.is_available = not product.is_available
        product.save(update_fields=["is_available", "updated_at"])
        logger.info(f"Product '{product.name}' is now {'available' if product.is_available else 'unavailable'}")
        return product

    @staticmethod
    @transaction.atomic
    def archive_product(product_id) -> Product:
        """
        Soft delete: the product stops being orderable but stays referenced by
        existing order items.
        """
        product = ProductService.get_product(product_id, for_update=True)
        if product.is_available:
            product.is_available = False
            product.save(update_fields=["is_available", "updated_at"])
        logger.info(f"Product '{product.name}' removed from the catalogue")
        return product
