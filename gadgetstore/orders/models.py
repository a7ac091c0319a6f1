import uuid

from django.db import models
from django.conf import settings

from gadgetstore.catalog.models import Product


class Order(models.Model):
    """
    A checkout submission. Lines and shipping address are a snapshot taken at
    creation; only the two status fields change afterwards.
    """
    ORDER_STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('delivered', 'Delivered'),
        ('cancelled', 'Cancelled'),
        ('completed', 'Completed'),
    ]

    PAYMENT_STATUS_CHOICES = [
        ('unpaid', 'Unpaid'),
        ('paid', 'Paid'),
    ]

    SHIPPING_METHOD_CHOICES = [
        ('Standard', 'Standard'),
        ('Express', 'Express'),
        ('Pickup', 'Pickup'),
    ]

    PAYMENT_METHOD_CHOICES = [
        ('Card', 'Card'),
        ('Mobile Money', 'Mobile Money'),
        ('PayPal', 'PayPal'),
        ('Cash on Delivery', 'Cash on Delivery'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='orders',
        verbose_name="Customer"
    )

    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    # Address snapshot
    shipping_address = models.JSONField(help_text="Copy of the address at checkout time")
    shipping_method = models.CharField(max_length=20, choices=SHIPPING_METHOD_CHOICES, default='Standard')
    payment_method = models.CharField(max_length=30, choices=PAYMENT_METHOD_CHOICES)

    order_status = models.CharField(max_length=20, choices=ORDER_STATUS_CHOICES, default='pending')
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default='unpaid')

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        ordering = ['-created_at']
        db_table = 'orders_order'

    def __str__(self):
        return f"Order {self.id} ({self.order_status}/{self.payment_status})"


class OrderItem(models.Model):
    """Purchased line. Name and price are copied so later catalog edits do not alter it."""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.SET_NULL, null=True, related_name='+')
    product_ref = models.CharField(max_length=36)

    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        verbose_name = "Order line"
        verbose_name_plural = "Order lines"
        db_table = 'orders_item'

    def __str__(self):
        return f"{self.quantity}x {self.product_name}"

    @property
    def subtotal(self):
        return self.price * self.quantity
