import uuid

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal


def default_specs():
    return {"Display": "", "Camera": "", "Storage": "", "Battery": ""}

# ====================================================================
# Product
# ====================================================================

class Product(models.Model):
    """A catalog product. Images live on the image host; only URLs are stored."""

    CATEGORY_CHOICES = [
        ('smartphones', 'Smartphones'),
        ('laptops', 'Laptops'),
        ('tablets', 'Tablets'),
        ('accessories', 'Accessories'),
        ('others', 'Others'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField()
    brand = models.CharField(max_length=120)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)

    price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))]
    )
    original_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    quantity = models.PositiveIntegerField(default=0, verbose_name="Stock on hand")
    featured = models.BooleanField(default=False)

    image_url = models.URLField(max_length=500, blank=True)
    images = models.JSONField(default=list, blank=True)
    specs = models.JSONField(default=default_specs, blank=True)

    # Display data only
    rating = models.FloatField(default=0, validators=[MinValueValidator(0), MaxValueValidator(5)])
    review_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True, null=True)

    class Meta:
        verbose_name = "Product"
        verbose_name_plural = "Products"
        ordering = ['-created_at']
        db_table = 'catalog_product'

    def __str__(self):
        return self.name

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0
