# gadgetstore/core/use_cases.py
"""
Use cases (business logic) of the store.
This layer depends only on the core entities and ports, which keeps the
business rules isolated from Django and from the HTTP surface.
"""
import json
import logging
import uuid
from collections import Counter
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional, Dict, Iterable, BinaryIO, Tuple

from gadgetstore.core.entities import (
    Account, Cart, Order, OrderItem, OrderTotals, MergeResult, Product, ShippingAddress,
    CATEGORIES, SPEC_KEYS, SHIPPING_METHODS, PAYMENT_METHODS,
)
from gadgetstore.core.exceptions import (
    AccountNotFoundError,
    ConflictError,
    InvalidCredentialsError,
    InvalidDataError,
    InvalidTransitionError,
    NotAuthorizedError,
    OrderNotFoundError,
    ProductNotFoundError,
)
from gadgetstore.core.ports import (
    IAccountRepository,
    ICartRepository,
    IImageHost,
    IOrderRepository,
    IProductRepository,
)

logger = logging.getLogger(__name__)

MAX_ADDITIONAL_IMAGES = 3
LOW_STOCK_THRESHOLD = 5

FREE_SHIPPING_THRESHOLD = Decimal('100')
SHIPPING_RATES = {
    "Standard": Decimal('9.99'),
    "Express": Decimal('19.99'),
    "Pickup": Decimal('0.00'),
}
TAX_RATE = Decimal('0.08')
TOTAL_TOLERANCE = Decimal('0.01')

MIN_PASSWORD_LENGTH = 8
MIN_PHONE_LENGTH = 8


def _to_decimal(value) -> Optional[Decimal]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes", "on")


def _to_int(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    number = _to_decimal(value)
    if number is None or number != number.to_integral_value():
        return None
    return int(number)


def is_valid_id(value) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


# ====================================================================
# 1. CATALOG USE CASES
# ====================================================================

def stock_status(quantity: int) -> str:
    if quantity <= 0:
        return "out-of-stock"
    if quantity < LOW_STOCK_THRESHOLD:
        return "low-stock"
    return "in-stock"


class ListProductsUseCase:
    """Lists the catalog with optional category, featured and text filters."""
    def __init__(self, product_repo: IProductRepository):
        self.product_repo = product_repo

    def execute(
        self,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        search: Optional[str] = None
    ) -> List[Product]:
        return self.product_repo.search(
            category=category or None,
            featured=featured,
            text=(search or "").strip() or None
        )


class ProductDetailUseCase:
    def __init__(self, product_repo: IProductRepository):
        self.product_repo = product_repo

    def execute(self, product_id: str) -> Product:
        product = self.product_repo.find_by_id(product_id)
        if not product:
            raise ProductNotFoundError()
        return product


class ManageProductsUseCase:
    """
    Admin catalog management: create, update, delete and stock adjustment.
    Images are pushed to the image host and only their URLs are stored.
    """
    def __init__(self, product_repo: IProductRepository, image_host: IImageHost):
        self.product_repo = product_repo
        self.image_host = image_host

    # --- field parsing shared by create and update ---

    @staticmethod
    def _parse_specs(raw) -> Dict[str, str]:
        if raw in (None, ""):
            raw = {}
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                raise InvalidDataError("Invalid specs format")
        if not isinstance(raw, dict):
            raise InvalidDataError("Invalid specs format")
        return {key: str(raw.get(key) or "") for key in SPEC_KEYS}

    @staticmethod
    def _parse_price(raw) -> Decimal:
        price = _to_decimal(raw)
        if price is None or price <= 0:
            raise InvalidDataError("Invalid price")
        return price

    @staticmethod
    def _parse_quantity(raw) -> int:
        quantity = _to_int(raw)
        if quantity is None or quantity < 0:
            raise InvalidDataError("quantity must be a non-negative integer")
        return quantity

    @staticmethod
    def _parse_category(raw) -> str:
        if raw not in CATEGORIES:
            raise InvalidDataError(f"Invalid category '{raw}'")
        return raw

    @staticmethod
    def _parse_original_price(raw) -> Optional[Decimal]:
        if raw in (None, ""):
            return None
        original = _to_decimal(raw)
        if original is None or original < 0:
            raise InvalidDataError("Invalid originalPrice")
        return original

    @staticmethod
    def _parse_rating(raw) -> float:
        if raw in (None, ""):
            return 0.0
        rating = _to_decimal(raw)
        if rating is None or not 0 <= rating <= 5:
            raise InvalidDataError("rating must be between 0 and 5")
        return float(rating)

    def _upload_all(self, files: Iterable[BinaryIO]) -> List[str]:
        files = list(files or [])
        if len(files) > MAX_ADDITIONAL_IMAGES:
            raise InvalidDataError(f"At most {MAX_ADDITIONAL_IMAGES} additional images are allowed")
        return [self.image_host.upload(f, folder="products") for f in files]

    # --- operations ---

    def create(
        self,
        data: dict,
        main_image: Optional[BinaryIO] = None,
        additional_images: Iterable[BinaryIO] = ()
    ) -> Product:
        specs = self._parse_specs(data.get('specs'))

        required = ('name', 'description', 'price', 'category', 'brand')
        if any(not data.get(name) for name in required):
            raise InvalidDataError("Missing required fields")

        price = self._parse_price(data.get('price'))
        category = self._parse_category(data.get('category'))
        quantity = self._parse_quantity(data.get('quantity', 0) or 0)
        original_price = self._parse_original_price(data.get('original_price'))

        if main_image is None:
            raise InvalidDataError("No main image provided")

        additional = list(additional_images or [])
        if len(additional) > MAX_ADDITIONAL_IMAGES:
            raise InvalidDataError(f"At most {MAX_ADDITIONAL_IMAGES} additional images are allowed")

        image_url = self.image_host.upload(main_image, folder="products")
        images = self._upload_all(additional)

        product = Product(
            name=data['name'],
            description=data['description'],
            price=price,
            category=category,
            brand=data['brand'],
            image=image_url,
            images=images,
            quantity=quantity,
            original_price=original_price,
            featured=_to_bool(data.get('featured', False)),
            specs=specs,
            rating=self._parse_rating(data.get('rating')),
            review_count=max(_to_int(data.get('review_count')) or 0, 0),
        )
        saved = self.product_repo.save(product)
        logger.info("Product %s created (%s)", saved.id, saved.name)
        return saved

    def update(
        self,
        product_id: str,
        data: dict,
        main_image: Optional[BinaryIO] = None,
        additional_images: Iterable[BinaryIO] = (),
        existing_image: Optional[str] = None,
        existing_additional_images: Optional[List[str]] = None
    ) -> Product:
        product = self.product_repo.find_by_id(product_id)
        if not product:
            raise ProductNotFoundError()

        for name in ('name', 'description', 'brand'):
            if name in data:
                if not data[name]:
                    raise InvalidDataError(f"{name} cannot be empty")
                setattr(product, name, data[name])

        if 'price' in data:
            product.price = self._parse_price(data['price'])
        if 'category' in data:
            product.category = self._parse_category(data['category'])
        if 'quantity' in data:
            product.quantity = self._parse_quantity(data['quantity'])
        if 'original_price' in data:
            product.original_price = self._parse_original_price(data['original_price'])
        if 'featured' in data:
            product.featured = _to_bool(data['featured'])
        if 'specs' in data:
            product.specs = self._parse_specs(data['specs'])

        if main_image is not None:
            product.image = self.image_host.upload(main_image, folder="products")
        elif existing_image:
            product.image = existing_image

        additional = list(additional_images or [])
        if existing_additional_images is not None or additional:
            kept = [url for url in (existing_additional_images or []) if url]
            product.images = kept + self._upload_all(additional)

        saved = self.product_repo.save(product)
        logger.info("Product %s updated", saved.id)
        return saved

    def delete(self, product_id: str):
        if not self.product_repo.delete(product_id):
            raise ProductNotFoundError()
        logger.info("Product %s deleted", product_id)

    def adjust_stock(self, product_id: str, quantity) -> Product:
        parsed = self._parse_quantity(quantity)
        if not self.product_repo.find_by_id(product_id):
            raise ProductNotFoundError()
        return self.product_repo.set_quantity(product_id, parsed)

    def stock_report(self) -> dict:
        """Every product with its stock status, plus the low/out-of-stock counters."""
        products = self.product_repo.search()
        rows = [(product, stock_status(product.quantity)) for product in products]
        return {
            'products': rows,
            'low_stock_count': sum(1 for _, status in rows if status == "low-stock"),
            'out_of_stock_count': sum(1 for _, status in rows if status == "out-of-stock"),
        }


# ====================================================================
# 2. CART USE CASES
# ====================================================================

def plan_cart_merge(local: Dict[str, int], server: Dict[str, int]) -> Dict[str, int]:
    """
    Positive quantity deltas that bring the server cart up to the local one.
    A server quantity is never decreased.
    """
    deltas = {}
    for product_id, quantity in local.items():
        delta = quantity - server.get(product_id, 0)
        if delta > 0:
            deltas[product_id] = delta
    return deltas


class ManageCartUseCase:
    """
    Central cart logic for an authenticated account (view, add, remove, merge).
    """
    def __init__(self, cart_repo: ICartRepository, product_repo: IProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    def _require_product(self, product_id: str) -> Product:
        product = self.product_repo.find_by_id(product_id)
        if not product:
            raise ProductNotFoundError()
        return product

    def get(self, account_id: str) -> Cart:
        return self.cart_repo.get_or_create(account_id)

    def add(self, account_id: str, product_id: str, quantity) -> Cart:
        """Applies a quantity delta. A line that drops to zero or below is removed."""
        delta = _to_int(quantity)
        if not delta:
            raise InvalidDataError("quantity must be a non-zero integer")
        if not product_id:
            raise InvalidDataError("productId is required")
        self._require_product(product_id)

        cart = self.cart_repo.get_or_create(account_id)
        line = cart.find(product_id)
        current = line.quantity if line else 0
        return self.cart_repo.set_line(account_id, product_id, current + delta)

    def remove(self, account_id: str, product_id: str) -> Cart:
        return self.cart_repo.remove_line(account_id, product_id)

    def set_quantity(self, account_id: str, product_id: str, quantity) -> Cart:
        target = _to_int(quantity)
        if target is None:
            raise InvalidDataError("quantity must be an integer")
        if target <= 0:
            return self.cart_repo.remove_line(account_id, product_id)
        self._require_product(product_id)
        return self.cart_repo.set_line(account_id, product_id, target)

    def merge(self, account_id: str, lines: Dict[str, int]) -> MergeResult:
        """
        Server side of the login-time merge: raises each line to at least the
        local quantity. Unknown products are skipped, never failing the merge.
        """
        cart = self.cart_repo.get_or_create(account_id)
        local = {}
        for product_id, quantity in lines.items():
            parsed = _to_int(quantity)
            if parsed and parsed > 0:
                local[str(product_id)] = parsed

        result = MergeResult(cart=cart)
        for product_id, delta in plan_cart_merge(local, cart.quantities()).items():
            if not self.product_repo.find_by_id(product_id):
                logger.warning("Cart merge for %s skipped unknown product %s", account_id, product_id)
                result.skipped.append(product_id)
                continue
            current = result.cart.quantities().get(product_id, 0)
            result.cart = self.cart_repo.set_line(account_id, product_id, current + delta)
            result.applied[product_id] = delta
        return result

    def clear(self, account_id: str) -> Cart:
        return self.cart_repo.clear(account_id)


# ====================================================================
# 3. ORDER CREATION
# ====================================================================

def validate_order_payload(data) -> None:
    """
    Boundary checks of a checkout submission, in the order clients rely on.
    Each failure is an InvalidDataError carrying the client-facing message.
    """
    if not isinstance(data, dict):
        raise InvalidDataError("Products are required")

    products = data.get('products')
    if not isinstance(products, list) or not products:
        raise InvalidDataError("Products are required")

    total = data.get('totalAmount')
    if isinstance(total, bool) or not isinstance(total, (int, float)) or not total:
        raise InvalidDataError("totalAmount (number) is required")

    address = data.get('shippingAddress')
    if not isinstance(address, dict) or any(
            not address.get(name) for name in ('fullName', 'city', 'district', 'phone')):
        raise InvalidDataError("Complete shippingAddress is required")

    method = data.get('paymentMethod')
    if not method:
        raise InvalidDataError("paymentMethod is required")
    if method not in PAYMENT_METHODS:
        raise InvalidDataError("paymentMethod is not recognized")


def calculate_order_totals(subtotal: Decimal, shipping_method: str = "Standard") -> OrderTotals:
    """Server-side pricing: free shipping from 100, flat rate below, 8% tax."""
    if subtotal >= FREE_SHIPPING_THRESHOLD:
        shipping = Decimal('0.00')
    else:
        shipping = SHIPPING_RATES.get(shipping_method, SHIPPING_RATES["Standard"])
    tax = (subtotal * TAX_RATE).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    return OrderTotals(subtotal=subtotal, shipping=shipping, tax=tax)


class CreateOrderUseCase:
    """
    Turns a checkout submission into a persisted order snapshot owned by the
    caller. No stock is decremented and no payment is captured here.
    """
    def __init__(
        self,
        order_repo: IOrderRepository,
        product_repo: IProductRepository,
        verify_total: bool = False
    ):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.verify_total = verify_total

    def _build_items(self, lines: List[dict]) -> List[OrderItem]:
        items = []
        for index, line in enumerate(lines, start=1):
            product_id = str(line.get('product') or "")
            if not product_id:
                raise InvalidDataError(f"Product line {index}: product is required")
            product = self.product_repo.find_by_id(product_id)
            if not product:
                raise InvalidDataError(f"Product line {index}: product {product_id} does not exist")

            quantity = _to_int(line.get('quantity'))
            if quantity is None or quantity < 1:
                raise InvalidDataError(f"Product line {index}: quantity must be at least 1")

            price = _to_decimal(line.get('price'))
            if price is None or price < 0:
                raise InvalidDataError(f"Product line {index}: price must be a non-negative number")

            items.append(OrderItem(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                price=price,
            ))
        return items

    def execute(
        self,
        account_id: str,
        lines: List[dict],
        total_amount,
        shipping_address: ShippingAddress,
        payment_method: str,
        shipping_method: Optional[str] = None
    ) -> Order:
        if not lines:
            raise InvalidDataError("Products are required")
        total = _to_decimal(total_amount)
        if not total:
            raise InvalidDataError("totalAmount (number) is required")
        total = total.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        if not payment_method:
            raise InvalidDataError("paymentMethod is required")
        if payment_method not in PAYMENT_METHODS:
            raise InvalidDataError("paymentMethod is not recognized")

        shipping_method = shipping_method or "Standard"
        if shipping_method not in SHIPPING_METHODS:
            raise InvalidDataError(f"shippingMethod '{shipping_method}' is not recognized")

        items = self._build_items(lines)
        subtotal = sum((item.subtotal for item in items), Decimal('0'))
        totals = calculate_order_totals(subtotal, shipping_method)

        if abs(totals.total - total) > TOTAL_TOLERANCE:
            if self.verify_total:
                raise InvalidDataError("totalAmount does not match order contents")
            logger.warning(
                "Order total from account %s is %s, expected %s", account_id, total, totals.total
            )

        order = Order(
            account_id=account_id,
            items=items,
            total_amount=total,
            subtotal=subtotal,
            shipping_address=shipping_address,
            payment_method=payment_method,
            shipping_method=shipping_method,
        )
        created = self.order_repo.create(order)
        logger.info("Order %s created for account %s (%s)", created.id, account_id, created.total_amount)
        return created


# ====================================================================
# 4. ORDER READ AND STATUS TRANSITIONS
# ====================================================================

class OrderAccessMixin:
    """Lookup shared by the order read and transition use cases."""
    order_repo: IOrderRepository

    def _load(self, order_id: str) -> Order:
        if not is_valid_id(order_id):
            raise InvalidDataError("Invalid order id")
        order = self.order_repo.find_by_id(order_id)
        if not order:
            raise OrderNotFoundError()
        return order


class ListOrdersUseCase:
    def __init__(self, order_repo: IOrderRepository):
        self.order_repo = order_repo

    def mine(self, account: Account) -> List[Order]:
        """Orders of the caller, newest first."""
        return self.order_repo.list_by_account(account.id)

    def all_orders(self, account: Account) -> List[Order]:
        """Every order in the system. Administrators only."""
        if not account.is_admin:
            raise NotAuthorizedError()
        return self.order_repo.list_all()


class OrderDetailUseCase(OrderAccessMixin):
    """An order is visible to its owner and to administrators."""
    def __init__(self, order_repo: IOrderRepository):
        self.order_repo = order_repo

    def execute(self, order_id: str, account: Account) -> Order:
        order = self._load(order_id)
        if order.account_id != account.id and not account.is_admin:
            raise NotAuthorizedError()
        return order


class OrderTransitionsUseCase(OrderAccessMixin):
    """Owner-initiated transitions: cancel a pending order, mark an order paid."""
    def __init__(self, order_repo: IOrderRepository):
        self.order_repo = order_repo

    def _load_owned(self, order_id: str, account: Account) -> Order:
        order = self._load(order_id)
        if order.account_id != account.id:
            raise NotAuthorizedError()
        return order

    def cancel(self, order_id: str, account: Account) -> Order:
        order = self._load_owned(order_id, account)
        if order.order_status != "pending":
            raise InvalidTransitionError("Only pending orders can be cancelled")
        logger.info("Order %s cancelled by %s", order.id, account.id)
        return self.order_repo.update_status(order.id, order_status="cancelled")

    def pay(self, order_id: str, account: Account) -> Order:
        order = self._load_owned(order_id, account)
        if order.payment_status == "paid":
            raise InvalidTransitionError("Order already paid")
        if order.order_status == "cancelled":
            raise InvalidTransitionError("Cancelled orders cannot be paid")
        logger.info("Order %s marked as paid by %s", order.id, account.id)
        return self.order_repo.update_status(order.id, order_status="paid", payment_status="paid")


class AdminOrderStatusUseCase(OrderAccessMixin):
    """Back-office fulfilment steps applied by administrators."""

    ALLOWED_TRANSITIONS = {
        "paid": "delivered",
        "delivered": "completed",
    }

    def __init__(self, order_repo: IOrderRepository):
        self.order_repo = order_repo

    def set_status(self, order_id: str, new_status: str) -> Order:
        order = self._load(order_id)
        if self.ALLOWED_TRANSITIONS.get(order.order_status) != new_status:
            raise InvalidTransitionError(
                f"Cannot change order status from '{order.order_status}' to '{new_status}'"
            )
        logger.info("Order %s moved from %s to %s", order.id, order.order_status, new_status)
        return self.order_repo.update_status(order.id, order_status=new_status)


# ====================================================================
# 5. ACCOUNT USE CASES
# ====================================================================

class RegisterAccountUseCase:
    def __init__(self, account_repo: IAccountRepository):
        self.account_repo = account_repo

    def execute(self, username: str, email: str, password: str, phone_number: str) -> Account:
        if not all([username, email, password, phone_number]):
            raise InvalidDataError("All fields username, email, password, phoneNumber are required.")
        email = email.strip().lower()
        if self.account_repo.email_taken(email):
            raise ConflictError("An account with this email already exists.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidDataError("Password must be at least 8 characters long")
        if len(str(phone_number)) < MIN_PHONE_LENGTH:
            raise InvalidDataError("phoneNumber must be at least 8 characters long")

        account = Account(
            email=email,
            username=username,
            phone_number=str(phone_number),
            role="user",
            auth_provider="jwt",
        )
        created = self.account_repo.create(account, password)
        logger.info("Account %s registered", created.id)
        return created


class AuthenticateUseCase:
    """Email and password login for locally registered accounts."""
    def __init__(self, account_repo: IAccountRepository):
        self.account_repo = account_repo

    def execute(self, email: str, password: str) -> Account:
        if not email or not password:
            raise InvalidDataError("Both email and password are required")
        account = self.account_repo.find_by_email(email.strip().lower())
        if not account:
            raise AccountNotFoundError()
        if account.is_oauth:
            raise InvalidDataError("This user can only log in using Google")
        if not self.account_repo.check_password(account.id, password):
            raise InvalidCredentialsError()
        return account


class UpdateProfileUseCase:
    """
    Profile edits. Accounts created through Google may only change their
    phone number; email uniqueness is enforced across all accounts.
    """
    def __init__(self, account_repo: IAccountRepository):
        self.account_repo = account_repo

    def execute(
        self,
        account_id: str,
        username: Optional[str] = None,
        email: Optional[str] = None,
        phone_number: Optional[str] = None
    ) -> Account:
        account = self.account_repo.find_by_id(account_id)
        if not account:
            raise AccountNotFoundError("Account not found")

        if email is not None:
            email = email.strip().lower()
        changes_identity = (
            (username is not None and username != account.username)
            or (email is not None and email != account.email)
        )
        if account.is_oauth and changes_identity:
            raise InvalidDataError("Google accounts can only update phoneNumber")

        if username is not None:
            if not username.strip():
                raise InvalidDataError("username cannot be empty")
            account.username = username.strip()
        if email is not None and email != account.email:
            if not email:
                raise InvalidDataError("email cannot be empty")
            if self.account_repo.email_taken(email, exclude_id=account.id):
                raise ConflictError("An account with this email already exists.")
            account.email = email
        if phone_number is not None:
            if len(str(phone_number)) < MIN_PHONE_LENGTH:
                raise InvalidDataError("phoneNumber must be at least 8 characters long")
            account.phone_number = str(phone_number)

        return self.account_repo.update(account)


class FindOrCreateOAuthAccountUseCase:
    """Resolves the account of a Google sign-in, creating it on first use."""
    def __init__(self, account_repo: IAccountRepository):
        self.account_repo = account_repo

    def execute(self, email: str, given_name: str = "", family_name: str = "") -> Account:
        if not email:
            raise InvalidDataError("email is required")
        email = email.strip().lower()
        account = self.account_repo.find_by_email(email)
        if account:
            return account
        username = f"{given_name or ''} {family_name or ''}".strip() or email.split("@")[0]
        created = self.account_repo.create(
            Account(email=email, username=username, role="user", auth_provider="google"),
            None,
        )
        logger.info("OAuth account %s created for %s", created.id, email)
        return created


# ====================================================================
# 6. ADMIN DASHBOARD
# ====================================================================

def month_bounds(now: datetime) -> Tuple[datetime, datetime, datetime]:
    """(start of last month, start of this month, start of next month)."""
    current = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if current.month == 1:
        previous = current.replace(year=current.year - 1, month=12)
    else:
        previous = current.replace(month=current.month - 1)
    if current.month == 12:
        following = current.replace(year=current.year + 1, month=1)
    else:
        following = current.replace(month=current.month + 1)
    return previous, current, following


def percent_change(current, previous) -> float:
    if not previous:
        return 0.0
    return round(float(current - previous) / float(previous) * 100, 1)


class DashboardStatsUseCase:
    """Month-over-month figures for the admin dashboard."""
    RECENT_ORDERS = 5
    TOP_PRODUCTS = 5

    def __init__(
        self,
        order_repo: IOrderRepository,
        product_repo: IProductRepository,
        account_repo: IAccountRepository
    ):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.account_repo = account_repo

    @staticmethod
    def _period(orders: List[Order]) -> dict:
        paid = [order for order in orders if order.counts_as_paid]
        total = len(orders)
        return {
            'revenue': sum((order.total_amount for order in paid), Decimal('0')),
            'orders': total,
            'products_sold': sum(order.units for order in orders),
            'conversion_rate': round(len(paid) / total * 100, 2) if total else 0.0,
        }

    def execute(self, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now()
        previous_start, current_start, next_start = month_bounds(now)

        current = self._period(self.order_repo.list_created_between(current_start, next_start))
        previous = self._period(self.order_repo.list_created_between(previous_start, current_start))

        all_orders = self.order_repo.list_all()
        units = Counter()
        names = {}
        for order in all_orders:
            for item in order.items:
                units[item.product_id] += item.quantity
                names[item.product_id] = item.product_name

        return {
            'total_revenue': current['revenue'],
            'revenue_change': percent_change(current['revenue'], previous['revenue']),
            'total_orders': current['orders'],
            'orders_change': percent_change(current['orders'], previous['orders']),
            'products_sold': current['products_sold'],
            'products_sold_change': percent_change(current['products_sold'], previous['products_sold']),
            'conversion_rate': current['conversion_rate'],
            'conversion_rate_change': round(current['conversion_rate'] - previous['conversion_rate'], 2),
            'account_count': self.account_repo.count(),
            'product_count': self.product_repo.count(),
            'order_count': len(all_orders),
            'recent_orders': all_orders[:self.RECENT_ORDERS],
            'top_products': [
                {'product': product_id, 'name': names[product_id], 'units_sold': sold}
                for product_id, sold in units.most_common(self.TOP_PRODUCTS)
            ],
        }

