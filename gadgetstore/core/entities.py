from dataclasses import dataclass, field
from decimal import Decimal
from datetime import datetime
from typing import List, Optional, Dict
import uuid

# ====================================================================
# CLOSED VALUE SETS
# ====================================================================

CATEGORIES = ("smartphones", "laptops", "tablets", "accessories", "others")
SPEC_KEYS = ("Display", "Camera", "Storage", "Battery")

SHIPPING_METHODS = ("Standard", "Express", "Pickup")
PAYMENT_METHODS = ("Card", "Mobile Money", "PayPal", "Cash on Delivery")

ORDER_STATUSES = ("pending", "paid", "delivered", "cancelled", "completed")
PAYMENT_STATUSES = ("unpaid", "paid")

ROLES = ("admin", "user")
AUTH_PROVIDERS = ("jwt", "google")

DEFAULT_COUNTRY = "Rwanda"


# ====================================================================
# CORE ENTITIES
# Business objects with no framework dependency.
# ====================================================================

@dataclass
class Account:
    """A registered customer or administrator."""
    email: str
    username: str
    role: str = "user"
    phone_number: Optional[str] = None
    auth_provider: str = "jwt"
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    date_joined: datetime = field(default_factory=datetime.now)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_oauth(self) -> bool:
        """OAuth accounts have no usable local password."""
        return self.auth_provider != "jwt"


@dataclass
class ShippingAddress:
    """Delivery address copied into the order at checkout."""
    full_name: str
    phone: str
    district: str
    city: str
    country: str = DEFAULT_COUNTRY


@dataclass
class Product:
    """A purchasable catalog record."""
    name: str
    description: str
    price: Decimal
    category: str
    brand: str
    image: str = ""
    images: List[str] = field(default_factory=list)
    quantity: int = 0
    original_price: Optional[Decimal] = None
    featured: bool = False
    specs: Dict[str, str] = field(default_factory=dict)
    rating: float = 0.0
    review_count: int = 0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

    @property
    def discount_percent(self) -> int:
        """Percentage saved against originalPrice, 0 when there is no discount."""
        if not self.original_price or self.original_price <= self.price:
            return 0
        saved = (self.original_price - self.price) / self.original_price * Decimal('100')
        return int(saved.quantize(Decimal('1')))


@dataclass
class CartItem:
    """A (product, quantity) line of a cart. Priced live from the catalog."""
    product_id: str
    quantity: int
    unit_price: Decimal
    product: Optional[Product] = None

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Cart:
    """Server-side cart, owned by exactly one account."""
    account_id: str
    items: List[CartItem] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    updated_at: Optional[datetime] = None

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal('0'))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def find(self, product_id: str) -> Optional[CartItem]:
        return next((item for item in self.items if item.product_id == product_id), None)

    def quantities(self) -> Dict[str, int]:
        return {item.product_id: item.quantity for item in self.items}


@dataclass
class OrderItem:
    """Snapshot of one purchased line (immutable once the order exists)."""
    product_id: str
    product_name: str
    quantity: int
    price: Decimal
    subtotal: Decimal = field(init=False)

    def __post_init__(self):
        self.subtotal = self.price * self.quantity


@dataclass
class Order:
    """A checkout submission. Only the two status fields change after creation."""
    account_id: str
    items: List[OrderItem]
    total_amount: Decimal
    shipping_address: ShippingAddress
    payment_method: str
    shipping_method: str = "Standard"
    order_status: str = "pending"
    payment_status: str = "unpaid"
    subtotal: Decimal = Decimal('0.00')
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None

    @property
    def units(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def counts_as_paid(self) -> bool:
        return self.order_status in ("paid", "completed") or self.payment_status == "paid"


@dataclass
class OrderTotals:
    """Server-side price breakdown of an order."""
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.shipping + self.tax


@dataclass
class MergeResult:
    """Outcome of merging a client-held cart into the server cart."""
    cart: Cart
    applied: Dict[str, int] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)
