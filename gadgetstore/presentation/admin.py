from django.contrib import admin

from gadgetstore.infrastructure.models import Account
from gadgetstore.catalog.models import Product
from gadgetstore.cart.models import Cart, CartItem
from gadgetstore.orders.models import Order, OrderItem


# ====================================================================
# 1. ACCOUNTS
# ====================================================================

@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    """Profile and role management. Passwords are set through the API."""
    list_display = ('email', 'username', 'role', 'auth_provider', 'phone_number', 'is_active')
    list_filter = ('role', 'auth_provider', 'is_active')
    search_fields = ('email', 'username', 'phone_number')
    ordering = ('email',)
    fields = ('email', 'username', 'phone_number', 'role', 'auth_provider', 'is_active', 'is_staff', 'is_superuser')
    readonly_fields = ('auth_provider',)


# ====================================================================
# 2. CATALOG
# ====================================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'brand', 'category', 'price', 'quantity', 'featured', 'created_at')
    list_filter = ('category', 'featured', 'brand')
    search_fields = ('name', 'brand', 'description', 'id')
    ordering = ('-created_at',)
    fieldsets = (
        ('Basics', {
            'fields': ('name', 'description', 'brand', 'category', 'featured')
        }),
        ('Pricing and stock', {
            'fields': ('price', 'original_price', 'quantity'),
        }),
        ('Media and details', {
            'fields': ('image_url', 'images', 'specs', 'rating', 'review_count'),
        }),
    )


# ====================================================================
# 3. CARTS
# ====================================================================

class CartItemInline(admin.TabularInline):
    model = CartItem
    raw_id_fields = ('product',)
    extra = 0


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ('account', 'updated_at')
    search_fields = ('account__email',)
    inlines = [CartItemInline]


# ====================================================================
# 4. ORDERS
# ====================================================================

class OrderItemInline(admin.TabularInline):
    """Line snapshots taken at checkout."""
    model = OrderItem
    readonly_fields = ('product_ref', 'product_name', 'price', 'quantity')
    exclude = ('product',)
    extra = 0
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'account', 'created_at', 'total_amount', 'order_status', 'payment_status', 'payment_method')
    list_filter = ('order_status', 'payment_status', 'payment_method', 'created_at')
    search_fields = ('id', 'account__email')
    date_hierarchy = 'created_at'
    inlines = [OrderItemInline]
    readonly_fields = (
        'account',
        'created_at',
        'total_amount',
        'subtotal',
        'shipping_address',
        'shipping_method',
        'payment_method',
    )

    def has_add_permission(self, request):
        """Orders only come from checkout."""
        return False
