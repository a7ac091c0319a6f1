"""
Infrastructure layer: repository implementations.

This layer turns the abstract operations declared by the core ports into
concrete calls to the framework (Django ORM) or, for tests and local
tooling, to plain in-memory dictionaries.
"""
import copy
from typing import List, Optional, Dict
from datetime import datetime
from django.core.exceptions import ValidationError
from django.db.models import Q, Prefetch
from django.db import transaction

# Lazy model loading
from django.apps import apps

from gadgetstore.core.entities import Account, Cart, CartItem, Order, Product
from gadgetstore.core.ports import (
    IAccountRepository,
    ICartRepository,
    IOrderRepository,
    IProductRepository,
)
from gadgetstore.core.exceptions import (
    AccountNotFoundError,
    OrderNotFoundError,
    ProductNotFoundError,
)

from .mappers import AccountMapper, CartMapper, OrderMapper, OrderItemMapper, ProductMapper

# Lookups by a malformed UUID raise these instead of DoesNotExist.
BAD_LOOKUP_ERRORS = (ValidationError, ValueError)


# ====================================================================
# 1. REPOSITORIES (Django ORM)
# ====================================================================

def get_model(app_label, model_name):
    """Loads the Django model lazily."""
    return apps.get_model(app_label, model_name)


class ProductRepositoryDjango(IProductRepository):

    @property
    def ProductModel(self):
        return get_model('catalog', 'Product')

    def find_by_id(self, product_id: str) -> Optional[Product]:
        try:
            return ProductMapper.to_entity(self.ProductModel.objects.get(pk=product_id))
        except self.ProductModel.DoesNotExist:
            return None
        except BAD_LOOKUP_ERRORS:
            return None

    def search(
        self,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        text: Optional[str] = None
    ) -> List[Product]:
        qs = self.ProductModel.objects.all()

        if category:
            qs = qs.filter(category=category)
        if featured is not None:
            qs = qs.filter(featured=featured)
        if text:
            qs = qs.filter(
                Q(name__icontains=text) | Q(description__icontains=text) | Q(brand__icontains=text)
            )

        return [ProductMapper.to_entity(model) for model in qs.order_by('-created_at')]

    @transaction.atomic
    def save(self, product: Product) -> Product:
        """Creates or updates a product from its entity."""
        model = self.ProductModel.objects.filter(pk=product.id).first()
        model = ProductMapper.to_model(product, model)
        model.save()
        return ProductMapper.to_entity(model)

    def set_quantity(self, product_id: str, quantity: int) -> Product:
        try:
            model = self.ProductModel.objects.get(pk=product_id)
        except self.ProductModel.DoesNotExist:
            raise ProductNotFoundError()
        except BAD_LOOKUP_ERRORS:
            raise ProductNotFoundError()
        model.quantity = quantity
        model.save(update_fields=['quantity', 'updated_at'])
        return ProductMapper.to_entity(model)

    def delete(self, product_id: str) -> bool:
        try:
            deleted, _ = self.ProductModel.objects.filter(pk=product_id).delete()
        except BAD_LOOKUP_ERRORS:
            return False
        return deleted > 0

    def count(self) -> int:
        return self.ProductModel.objects.count()


class CartRepositoryDjango(ICartRepository):

    @property
    def CartModel(self):
        return get_model('cart', 'Cart')

    @property
    def CartItemModel(self):
        return get_model('cart', 'CartItem')

    def _cart_model(self, account_id: str):
        model, created = self.CartModel.objects.get_or_create(account_id=account_id)
        return model

    def get_or_create(self, account_id: str) -> Cart:
        return CartMapper.to_entity(self._cart_model(account_id))

    @transaction.atomic
    def set_line(self, account_id: str, product_id: str, quantity: int) -> Cart:
        cart_model = self._cart_model(account_id)
        if quantity <= 0:
            self.CartItemModel.objects.filter(cart=cart_model, product_id=product_id).delete()
        else:
            self.CartItemModel.objects.update_or_create(
                cart=cart_model,
                product_id=product_id,
                defaults={'quantity': quantity}
            )
        cart_model.save(update_fields=['updated_at'])
        return CartMapper.to_entity(cart_model)

    @transaction.atomic
    def remove_line(self, account_id: str, product_id: str) -> Cart:
        cart_model = self._cart_model(account_id)
        try:
            self.CartItemModel.objects.filter(cart=cart_model, product_id=product_id).delete()
        except BAD_LOOKUP_ERRORS:
            # A malformed id cannot match a line
            pass
        cart_model.save(update_fields=['updated_at'])
        return CartMapper.to_entity(cart_model)

    @transaction.atomic
    def clear(self, account_id: str) -> Cart:
        cart_model = self._cart_model(account_id)
        self.CartItemModel.objects.filter(cart=cart_model).delete()
        cart_model.save(update_fields=['updated_at'])
        return CartMapper.to_entity(cart_model)


class OrderRepositoryDjango(IOrderRepository):

    @property
    def OrderModel(self):
        return get_model('orders', 'Order')

    @property
    def OrderItemModel(self):
        return get_model('orders', 'OrderItem')

    def _queryset(self):
        return self.OrderModel.objects.prefetch_related(
            Prefetch('items', queryset=self.OrderItemModel.objects.order_by('id'))
        ).order_by('-created_at')

    @transaction.atomic
    def create(self, order: Order) -> Order:
        """Writes the order and its line snapshot in one transaction."""
        model = OrderMapper.to_model(order)
        model.save()
        self.OrderItemModel.objects.bulk_create([
            OrderItemMapper.to_model(item, model) for item in order.items
        ])
        return self.find_by_id(str(model.id))

    def find_by_id(self, order_id: str) -> Optional[Order]:
        try:
            return OrderMapper.to_entity(self._queryset().get(pk=order_id))
        except self.OrderModel.DoesNotExist:
            return None
        except BAD_LOOKUP_ERRORS:
            return None

    def list_by_account(self, account_id: str) -> List[Order]:
        return [OrderMapper.to_entity(model) for model in self._queryset().filter(account_id=account_id)]

    def list_all(self) -> List[Order]:
        return [OrderMapper.to_entity(model) for model in self._queryset()]

    def list_created_between(self, start: datetime, end: datetime) -> List[Order]:
        qs = self._queryset().filter(created_at__gte=start, created_at__lt=end)
        return [OrderMapper.to_entity(model) for model in qs]

    @transaction.atomic
    def update_status(
        self,
        order_id: str,
        order_status: Optional[str] = None,
        payment_status: Optional[str] = None
    ) -> Order:
        """Both fields change in a single save."""
        try:
            model = self.OrderModel.objects.select_for_update().get(pk=order_id)
        except self.OrderModel.DoesNotExist:
            raise OrderNotFoundError()

        fields = ['updated_at']
        if order_status is not None:
            model.order_status = order_status
            fields.append('order_status')
        if payment_status is not None:
            model.payment_status = payment_status
            fields.append('payment_status')
        model.save(update_fields=fields)
        return self.find_by_id(order_id)

    def count(self) -> int:
        return self.OrderModel.objects.count()


class AccountRepositoryDjango(IAccountRepository):

    @property
    def AccountModel(self):
        return get_model('infrastructure', 'Account')

    def _get(self, account_id: str):
        try:
            return self.AccountModel.objects.get(pk=account_id)
        except self.AccountModel.DoesNotExist:
            return None
        except BAD_LOOKUP_ERRORS:
            return None

    def find_by_id(self, account_id: str) -> Optional[Account]:
        return AccountMapper.to_entity(self._get(account_id))

    def find_by_email(self, email: str) -> Optional[Account]:
        model = self.AccountModel.objects.filter(email__iexact=email).first()
        return AccountMapper.to_entity(model)

    def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        qs = self.AccountModel.objects.filter(email__iexact=email)
        if exclude_id:
            qs = qs.exclude(pk=exclude_id)
        return qs.exists()

    @transaction.atomic
    def create(self, account: Account, password: Optional[str]) -> Account:
        model = self.AccountModel.objects.create_user(
            account.email,
            password,
            id=account.id,
            username=account.username,
            role=account.role,
            phone_number=account.phone_number,
            auth_provider=account.auth_provider,
        )
        return AccountMapper.to_entity(model)

    def update(self, account: Account) -> Account:
        model = self._get(account.id)
        if not model:
            raise AccountNotFoundError("Account not found")
        model = AccountMapper.to_model(account, model)
        model.save()
        return AccountMapper.to_entity(model)

    def check_password(self, account_id: str, password: str) -> bool:
        model = self._get(account_id)
        return bool(model and model.check_password(password))

    def count(self) -> int:
        return self.AccountModel.objects.count()


# ====================================================================
# 2. IN-MEMORY REPOSITORIES (core tests and local tooling)
# ====================================================================

class InMemoryProductRepository(IProductRepository):
    def __init__(self):
        self.products: Dict[str, Product] = {}

    def find_by_id(self, product_id: str) -> Optional[Product]:
        product = self.products.get(str(product_id))
        return copy.deepcopy(product) if product else None

    def search(self, category=None, featured=None, text=None) -> List[Product]:
        found = list(self.products.values())
        if category:
            found = [p for p in found if p.category == category]
        if featured is not None:
            found = [p for p in found if p.featured == featured]
        if text:
            needle = text.lower()
            found = [
                p for p in found
                if needle in p.name.lower() or needle in p.description.lower() or needle in p.brand.lower()
            ]
        found.sort(key=lambda p: p.created_at, reverse=True)
        return [copy.deepcopy(p) for p in found]

    def save(self, product: Product) -> Product:
        self.products[product.id] = copy.deepcopy(product)
        return copy.deepcopy(product)

    def set_quantity(self, product_id: str, quantity: int) -> Product:
        if product_id not in self.products:
            raise ProductNotFoundError()
        self.products[product_id].quantity = quantity
        return copy.deepcopy(self.products[product_id])

    def delete(self, product_id: str) -> bool:
        return self.products.pop(product_id, None) is not None

    def count(self) -> int:
        return len(self.products)


class InMemoryCartRepository(ICartRepository):
    """Lines are priced from the product repository on every read."""
    def __init__(self, product_repo: InMemoryProductRepository):
        self.product_repo = product_repo
        self.lines: Dict[str, Dict[str, int]] = {}

    def _build(self, account_id: str) -> Cart:
        items = []
        for product_id, quantity in self.lines.setdefault(account_id, {}).items():
            product = self.product_repo.find_by_id(product_id)
            if product:
                items.append(CartItem(product_id, quantity, product.price, product))
        return Cart(account_id=account_id, items=items)

    def get_or_create(self, account_id: str) -> Cart:
        return self._build(account_id)

    def set_line(self, account_id: str, product_id: str, quantity: int) -> Cart:
        lines = self.lines.setdefault(account_id, {})
        if quantity <= 0:
            lines.pop(product_id, None)
        else:
            lines[product_id] = quantity
        return self._build(account_id)

    def remove_line(self, account_id: str, product_id: str) -> Cart:
        self.lines.setdefault(account_id, {}).pop(product_id, None)
        return self._build(account_id)

    def clear(self, account_id: str) -> Cart:
        self.lines[account_id] = {}
        return self._build(account_id)


class InMemoryOrderRepository(IOrderRepository):
    def __init__(self):
        self.orders: Dict[str, Order] = {}

    def _sorted(self, orders) -> List[Order]:
        return [copy.deepcopy(o) for o in sorted(orders, key=lambda o: o.created_at, reverse=True)]

    def create(self, order: Order) -> Order:
        self.orders[order.id] = copy.deepcopy(order)
        return copy.deepcopy(order)

    def find_by_id(self, order_id: str) -> Optional[Order]:
        order = self.orders.get(str(order_id))
        return copy.deepcopy(order) if order else None

    def list_by_account(self, account_id: str) -> List[Order]:
        return self._sorted(o for o in self.orders.values() if o.account_id == account_id)

    def list_all(self) -> List[Order]:
        return self._sorted(self.orders.values())

    def list_created_between(self, start: datetime, end: datetime) -> List[Order]:
        return self._sorted(o for o in self.orders.values() if start <= o.created_at < end)

    def update_status(self, order_id, order_status=None, payment_status=None) -> Order:
        order = self.orders.get(order_id)
        if not order:
            raise OrderNotFoundError()
        if order_status is not None:
            order.order_status = order_status
        if payment_status is not None:
            order.payment_status = payment_status
        order.updated_at = datetime.now()
        return copy.deepcopy(order)

    def count(self) -> int:
        return len(self.orders)


class InMemoryAccountRepository(IAccountRepository):
    """Stores plain passwords; never used outside tests and scripts."""
    def __init__(self):
        self.accounts: Dict[str, Account] = {}
        self.passwords: Dict[str, Optional[str]] = {}

    def find_by_id(self, account_id: str) -> Optional[Account]:
        account = self.accounts.get(str(account_id))
        return copy.deepcopy(account) if account else None

    def find_by_email(self, email: str) -> Optional[Account]:
        for account in self.accounts.values():
            if account.email.lower() == email.lower():
                return copy.deepcopy(account)
        return None

    def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            a.email.lower() == email.lower() and a.id != exclude_id
            for a in self.accounts.values()
        )

    def create(self, account: Account, password: Optional[str]) -> Account:
        self.accounts[account.id] = copy.deepcopy(account)
        self.passwords[account.id] = password
        return copy.deepcopy(account)

    def update(self, account: Account) -> Account:
        if account.id not in self.accounts:
            raise AccountNotFoundError("Account not found")
        self.accounts[account.id] = copy.deepcopy(account)
        return copy.deepcopy(account)

    def check_password(self, account_id: str, password: str) -> bool:
        stored = self.passwords.get(account_id)
        return stored is not None and stored == password

    def count(self) -> int:
        return len(self.accounts)
