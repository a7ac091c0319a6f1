# gadgetstore/storefront/contracts.py
"""
Shapes the storefront accepts from the store API. Each one mirrors the
server's output serializer; a body that does not fit is rejected at the
client boundary instead of surfacing as a KeyError deep in a store.

Timestamps stay ISO strings so validated bodies remain JSON-serialisable.
"""
from rest_framework import serializers

from gadgetstore.core.entities import ORDER_STATUSES, PAYMENT_STATUSES, ROLES


class ProductContract(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.FloatField(required=False, min_value=0)
    originalPrice = serializers.FloatField(required=False, allow_null=True)
    discountPercent = serializers.IntegerField(required=False)
    category = serializers.CharField(required=False, allow_blank=True)
    brand = serializers.CharField(required=False, allow_blank=True)
    imageUrl = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    images = serializers.ListField(child=serializers.CharField(), required=False)
    quantity = serializers.IntegerField(required=False, min_value=0)
    inStock = serializers.BooleanField(required=False)
    featured = serializers.BooleanField(required=False)
    specs = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)
    rating = serializers.FloatField(required=False)
    reviewCount = serializers.IntegerField(required=False)
    createdAt = serializers.CharField(required=False)
    updatedAt = serializers.CharField(required=False, allow_null=True)


class ProductListContract(serializers.Serializer):
    products = ProductContract(many=True)


class CartLineContract(serializers.Serializer):
    productId = serializers.CharField()
    product = ProductContract(required=False)
    quantity = serializers.IntegerField(min_value=1)
    subtotal = serializers.FloatField(required=False)


class CartContract(serializers.Serializer):
    items = CartLineContract(many=True)
    itemCount = serializers.IntegerField(required=False, min_value=0)
    total = serializers.FloatField(required=False)


class AccountContract(serializers.Serializer):
    id = serializers.CharField()
    username = serializers.CharField(required=False, allow_blank=True)
    email = serializers.CharField()
    role = serializers.ChoiceField(choices=ROLES)
    phoneNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    authProvider = serializers.CharField(required=False)


class SessionContract(serializers.Serializer):
    """Body of login and of the dashboard session check."""
    message = serializers.CharField(required=False, allow_blank=True)
    user = AccountContract()


class MessageContract(serializers.Serializer):
    success = serializers.BooleanField(required=False)
    message = serializers.CharField(required=False, allow_blank=True)


class OrderLineContract(serializers.Serializer):
    product = serializers.CharField()
    name = serializers.CharField(allow_blank=True)
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.FloatField(min_value=0)
    subtotal = serializers.FloatField(required=False)


class OrderContract(serializers.Serializer):
    id = serializers.CharField()
    account = serializers.CharField(required=False)
    products = OrderLineContract(many=True)
    totalAmount = serializers.FloatField()
    subtotal = serializers.FloatField(required=False)
    shippingAddress = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)
    shippingMethod = serializers.CharField(required=False)
    paymentMethod = serializers.CharField(required=False)
    orderStatus = serializers.ChoiceField(choices=ORDER_STATUSES)
    paymentStatus = serializers.ChoiceField(choices=PAYMENT_STATUSES)
    createdAt = serializers.CharField(required=False)
    updatedAt = serializers.CharField(required=False, allow_null=True)


class PlacedOrderContract(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True)
    order = OrderContract()
