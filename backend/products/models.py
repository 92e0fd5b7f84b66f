from django.db import models
from django.utils.translation import gettext_lazy as _


class Category(models.Model):
    class Kind(models.TextChoices):
        FOOD = "food", _("Food")
        BEVERAGE = "beverage", _("Beverage")

    name = models.CharField(
        max_length=100, unique=True, help_text=_("Name of the product category.")
    )
    description = models.TextField(
        blank=True, help_text=_("Description of the category.")
    )
    kind = models.CharField(
        max_length=10,
        choices=Kind.choices,
        default=Kind.FOOD,
        help_text=_("Which kitchen station prepares products in this category."),
    )
    sort_order = models.IntegerField(
        default=0,
        help_text=_("Display order for this category. Lower numbers appear first."),
    )
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        verbose_name = _("Category")
        verbose_name_plural = _("Categories")
        ordering = ["sort_order", "name"]

    def __str__(self):
        return self.name


class Product(models.Model):
    name = models.CharField(max_length=200, help_text=_("Name of the product."))
    description = models.TextField(
        blank=True, help_text=_("Detailed description of the product.")
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("The current selling price. Order items snapshot it when added."),
    )
    category = models.ForeignKey(
        Category,
        related_name="products",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text=_("Product category. Leave blank for uncategorized products."),
    )
    emoji = models.CharField(max_length=16, blank=True)
    preparation_time = models.PositiveIntegerField(
        default=0, help_text=_("Typical preparation time in minutes.")
    )
    is_available = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def kitchen_category(self):
        """Category kind used by kitchen screens; uncategorized products count as food."""
        return self.category.kind if self.category_id else Category.Kind.FOOD
