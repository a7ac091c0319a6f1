# gadgetstore/core/ports.py
"""
Ports (Protocols) of the clean architecture.

These protocols are the contract the infrastructure layer (repositories,
gateways) MUST satisfy to plug into the core use cases.
"""

from typing import Protocol, List, Optional, BinaryIO
from abc import abstractmethod
from datetime import datetime

from gadgetstore.core.entities import Account, Cart, Order, Product


# ====================================================================
# 1. REPOSITORIES (persistence ports)
# ====================================================================

class IProductRepository(Protocol):
    """Persistence and lookup of catalog products."""

    @abstractmethod
    def find_by_id(self, product_id: str) -> Optional[Product]: ...

    @abstractmethod
    def search(
        self,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        text: Optional[str] = None
    ) -> List[Product]: ...

    @abstractmethod
    def save(self, product: Product) -> Product: ...

    @abstractmethod
    def set_quantity(self, product_id: str, quantity: int) -> Product: ...

    @abstractmethod
    def delete(self, product_id: str) -> bool: ...

    @abstractmethod
    def count(self) -> int: ...


class ICartRepository(Protocol):
    """Persistence of per-account carts."""

    @abstractmethod
    def get_or_create(self, account_id: str) -> Cart: ...

    @abstractmethod
    def set_line(self, account_id: str, product_id: str, quantity: int) -> Cart:
        """Stores the exact quantity of a line. quantity <= 0 drops the line."""
        ...

    @abstractmethod
    def remove_line(self, account_id: str, product_id: str) -> Cart: ...

    @abstractmethod
    def clear(self, account_id: str) -> Cart: ...


class IOrderRepository(Protocol):
    """Persistence of orders. Items and address are written once, at creation."""

    @abstractmethod
    def create(self, order: Order) -> Order: ...

    @abstractmethod
    def find_by_id(self, order_id: str) -> Optional[Order]: ...

    @abstractmethod
    def list_by_account(self, account_id: str) -> List[Order]: ...

    @abstractmethod
    def list_all(self) -> List[Order]: ...

    @abstractmethod
    def list_created_between(self, start: datetime, end: datetime) -> List[Order]: ...

    @abstractmethod
    def update_status(
        self,
        order_id: str,
        order_status: Optional[str] = None,
        payment_status: Optional[str] = None
    ) -> Order: ...

    @abstractmethod
    def count(self) -> int: ...


class IAccountRepository(Protocol):
    """Persistence of accounts. Password hashing stays inside the implementation."""

    @abstractmethod
    def find_by_id(self, account_id: str) -> Optional[Account]: ...

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[Account]: ...

    @abstractmethod
    def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool: ...

    @abstractmethod
    def create(self, account: Account, password: Optional[str]) -> Account: ...

    @abstractmethod
    def update(self, account: Account) -> Account: ...

    @abstractmethod
    def check_password(self, account_id: str, password: str) -> bool: ...

    @abstractmethod
    def count(self) -> int: ...


# ====================================================================
# 2. GATEWAYS (external service ports)
# ====================================================================

class IImageHost(Protocol):
    """Third-party image hosting. Returns the public (secure) URL of the upload."""

    @abstractmethod
    def upload(self, file: BinaryIO, folder: str = "products") -> str: ...
