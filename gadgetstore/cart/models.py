# Models of the Cart domain.

import uuid

from django.db import models
from django.db.models import Sum, F
from django.conf import settings
from decimal import Decimal

from gadgetstore.catalog.models import Product


class Cart(models.Model):
    """One cart per account."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='cart'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Cart"
        verbose_name_plural = "Carts"
        db_table = 'cart_cart'

    def __str__(self):
        return f"Cart of {self.account}"

    @property
    def total(self) -> Decimal:
        """Live total, priced from the catalog."""
        total = self.items.aggregate(
            total=Sum(F('quantity') * F('product__price'))
        )['total'] or Decimal('0')
        return Decimal(total)

    @property
    def item_count(self) -> int:
        total = self.items.aggregate(total=Sum('quantity'))['total']
        return total or 0


class CartItem(models.Model):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.CASCADE)
    quantity = models.PositiveIntegerField(default=1)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Cart line"
        verbose_name_plural = "Cart lines"
        unique_together = ('cart', 'product')
        ordering = ['added_at']
        db_table = 'cart_item'

    def __str__(self):
        return f"{self.quantity}x {self.product.name}"

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity
