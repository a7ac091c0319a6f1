from rest_framework import serializers

from gadgetstore.core.entities import (
    DEFAULT_COUNTRY, PAYMENT_METHODS, SHIPPING_METHODS, ShippingAddress,
)
from gadgetstore.core.use_cases import validate_order_payload


# ====================================================================
# ACCOUNT AND CATALOG SERIALIZERS
# Entities in, camelCase JSON out.
# ====================================================================

class AccountSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    username = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)
    role = serializers.CharField(read_only=True)
    phoneNumber = serializers.CharField(source='phone_number', read_only=True, allow_null=True)
    authProvider = serializers.CharField(source='auth_provider', read_only=True)


class RegisterSerializer(serializers.Serializer):
    """
    Type and format checks only. Missing or blank fields pass through so the
    use case can answer with its single 'all fields are required' message.
    """
    username = serializers.CharField(required=False, allow_blank=True, max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    phoneNumber = serializers.CharField(source='phone_number', required=False, allow_blank=True, max_length=30)


class LoginSerializer(serializers.Serializer):
    # Plain strings: an unknown address is a 404, not a format error
    email = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)


class ProfileUpdateSerializer(serializers.Serializer):
    username = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False, max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    phoneNumber = serializers.CharField(source='phone_number', required=False, max_length=30)


class ProductSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    price = serializers.FloatField(read_only=True)
    originalPrice = serializers.FloatField(source='original_price', read_only=True, allow_null=True)
    discountPercent = serializers.IntegerField(source='discount_percent', read_only=True)
    category = serializers.CharField(read_only=True)
    brand = serializers.CharField(read_only=True)
    imageUrl = serializers.CharField(source='image', read_only=True)
    images = serializers.ListField(child=serializers.CharField(), read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    inStock = serializers.BooleanField(source='in_stock', read_only=True)
    featured = serializers.BooleanField(read_only=True)
    specs = serializers.DictField(child=serializers.CharField(allow_blank=True), read_only=True)
    rating = serializers.FloatField(read_only=True)
    reviewCount = serializers.IntegerField(source='review_count', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True, allow_null=True)


class StockRowSerializer(serializers.Serializer):
    """Serializes a (product, stock status) pair of the stock report."""

    def to_representation(self, instance):
        product, stock_status = instance
        return {
            'id': product.id,
            'name': product.name,
            'brand': product.brand,
            'category': product.category,
            'price': float(product.price),
            'imageUrl': product.image,
            'quantity': product.quantity,
            'status': stock_status,
        }


# ====================================================================
# CART SERIALIZERS
# ====================================================================

class CartLineSerializer(serializers.Serializer):
    productId = serializers.CharField(source='product_id', read_only=True)
    product = ProductSerializer(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    subtotal = serializers.FloatField(read_only=True)


class CartSerializer(serializers.Serializer):
    """Totals are derived from the lines on every read."""
    items = CartLineSerializer(many=True, read_only=True)
    itemCount = serializers.IntegerField(source='item_count', read_only=True)
    total = serializers.FloatField(read_only=True)


# ====================================================================
# ORDER SERIALIZERS
# ====================================================================

class ShippingAddressSerializer(serializers.Serializer):
    fullName = serializers.CharField(source='full_name', max_length=255)
    phone = serializers.CharField(max_length=30)
    country = serializers.CharField(max_length=100, required=False, default=DEFAULT_COUNTRY)
    district = serializers.CharField(max_length=100)
    city = serializers.CharField(max_length=100)


class OrderLineInputSerializer(serializers.Serializer):
    product = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.FloatField(min_value=0)


class OrderCreateSerializer(serializers.Serializer):
    """
    Checkout submission. The ordered checks clients rely on run before the
    per-field validation.
    """
    products = OrderLineInputSerializer(many=True)
    totalAmount = serializers.FloatField()
    shippingAddress = ShippingAddressSerializer()
    shippingMethod = serializers.ChoiceField(choices=SHIPPING_METHODS, required=False, default='Standard')
    paymentMethod = serializers.ChoiceField(choices=PAYMENT_METHODS)

    def to_internal_value(self, data):
        validate_order_payload(data)
        return super().to_internal_value(data)

    def to_order_kwargs(self) -> dict:
        """Arguments of CreateOrderUseCase.execute, minus the account."""
        data = self.validated_data
        address = data['shippingAddress']
        return {
            'lines': [dict(line) for line in data['products']],
            'total_amount': data['totalAmount'],
            'shipping_address': ShippingAddress(
                full_name=address['full_name'],
                phone=address['phone'],
                district=address['district'],
                city=address['city'],
                country=address.get('country') or DEFAULT_COUNTRY,
            ),
            'payment_method': data['paymentMethod'],
            'shipping_method': data.get('shippingMethod') or 'Standard',
        }


class OrderItemSerializer(serializers.Serializer):
    product = serializers.CharField(source='product_id', read_only=True)
    name = serializers.CharField(source='product_name', read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    price = serializers.FloatField(read_only=True)
    subtotal = serializers.FloatField(read_only=True)


class OrderSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    account = serializers.CharField(source='account_id', read_only=True)
    products = OrderItemSerializer(source='items', many=True, read_only=True)
    totalAmount = serializers.FloatField(source='total_amount', read_only=True)
    subtotal = serializers.FloatField(read_only=True)
    shippingAddress = ShippingAddressSerializer(source='shipping_address', read_only=True)
    shippingMethod = serializers.CharField(source='shipping_method', read_only=True)
    paymentMethod = serializers.CharField(source='payment_method', read_only=True)
    orderStatus = serializers.CharField(source='order_status', read_only=True)
    paymentStatus = serializers.CharField(source='payment_status', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True, allow_null=True)


# ====================================================================
# BACK-OFFICE SERIALIZERS
# ====================================================================

class TopProductSerializer(serializers.Serializer):
    product = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    unitsSold = serializers.IntegerField(source='units_sold', read_only=True)


class DashboardStatsSerializer(serializers.Serializer):
    totalRevenue = serializers.FloatField(source='total_revenue')
    revenueChange = serializers.FloatField(source='revenue_change')
    totalOrders = serializers.IntegerField(source='total_orders')
    ordersChange = serializers.FloatField(source='orders_change')
    productsSold = serializers.IntegerField(source='products_sold')
    productsSoldChange = serializers.FloatField(source='products_sold_change')
    conversionRate = serializers.FloatField(source='conversion_rate')
    conversionRateChange = serializers.FloatField(source='conversion_rate_change')
    accountCount = serializers.IntegerField(source='account_count')
    productCount = serializers.IntegerField(source='product_count')
    orderCount = serializers.IntegerField(source='order_count')
    recentOrders = OrderSerializer(source='recent_orders', many=True)
    topProducts = TopProductSerializer(source='top_products', many=True)
