# gadgetstore/storefront/cart_store.py
"""
Client cart: the shopper's lines, persisted through a StorageAdapter and
mirrored to the server cart once the shopper is signed in.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from gadgetstore.core.use_cases import plan_cart_merge
from .api_client import ApiError, StoreApiClient, parse_response
from .contracts import CartContract
from .storage import StorageAdapter

logger = logging.getLogger(__name__)

CART_KEY = 'cart'

# Product fields kept in a local line
SNAPSHOT_FIELDS = ('id', 'name', 'price', 'imageUrl', 'brand', 'category')


def _snapshot(product: dict) -> dict:
    return {key: product.get(key) for key in SNAPSHOT_FIELDS if key in product}


def _is_valid_line(line) -> bool:
    """Stored lines come from disk and may be stale or hand-edited."""
    if not isinstance(line, dict) or not isinstance(line.get('product'), dict):
        return False
    quantity = line.get('quantity')
    return (
        bool(line['product'].get('id'))
        and isinstance(quantity, int) and not isinstance(quantity, bool)
        and quantity > 0
    )


class CartStore:
    """
    Lines are kept in insertion order as {'product': snapshot, 'quantity': n}.
    Totals are derived from the lines on every read.
    """

    def __init__(self, storage: StorageAdapter, api: Optional[StoreApiClient] = None):
        self.storage = storage
        self.api = api
        self.authenticated = False
        stored = storage.load(CART_KEY, []) or []
        self._lines: List[dict] = [line for line in stored if _is_valid_line(line)] if isinstance(stored, list) else []

    # ----------------------------------------------------------------
    # Reads
    # ----------------------------------------------------------------

    @property
    def items(self) -> List[dict]:
        return [dict(line) for line in self._lines]

    @property
    def item_count(self) -> int:
        return sum(line['quantity'] for line in self._lines)

    @property
    def total(self) -> Decimal:
        return sum(
            (Decimal(str(line['product'].get('price') or 0)) * line['quantity'] for line in self._lines),
            Decimal('0')
        ).quantize(Decimal('0.01'))

    def quantities(self) -> Dict[str, int]:
        return {line['product']['id']: line['quantity'] for line in self._lines}

    def _find(self, product_id: str) -> Optional[dict]:
        for line in self._lines:
            if line['product']['id'] == product_id:
                return line
        return None

    # ----------------------------------------------------------------
    # Mutations
    # ----------------------------------------------------------------

    def _persist(self) -> None:
        self.storage.save(CART_KEY, self._lines)

    def _mirror(self, action: str, call, *args) -> None:
        """Sends one mutation to the server. Failures are logged and dropped."""
        if not (self.authenticated and self.api):
            return
        try:
            call(*args)
        except ApiError as e:
            logger.warning("Cart %s for %s not mirrored: %s", action, args[0], e.message)

    def add(self, product: dict, quantity: int = 1) -> None:
        if quantity <= 0:
            return
        product_id = str(product['id'])
        line = self._find(product_id)
        if line:
            line['quantity'] += quantity
        else:
            self._lines.append({'product': _snapshot(dict(product, id=product_id)), 'quantity': quantity})
        self._persist()
        if self.api:
            self._mirror('add', self.api.add_to_cart, product_id, quantity)

    def remove(self, product_id: str) -> None:
        line = self._find(product_id)
        if not line:
            return
        self._lines.remove(line)
        self._persist()
        if self.api:
            self._mirror('remove', self.api.remove_from_cart, product_id)

    def set_quantity(self, product_id: str, quantity: int) -> None:
        """Zero or less removes the line."""
        if quantity <= 0:
            self.remove(product_id)
            return
        line = self._find(product_id)
        if not line:
            return
        delta = quantity - line['quantity']
        line['quantity'] = quantity
        self._persist()
        if delta and self.api:
            self._mirror('update', self.api.add_to_cart, product_id, delta)

    def clear(self) -> None:
        """Empties the local cart only."""
        self._lines = []
        self._persist()

    # ----------------------------------------------------------------
    # Login merge
    # ----------------------------------------------------------------

    def _read_server_cart(self) -> dict:
        """The server cart, checked against the cart contract."""
        return parse_response(CartContract, self.api.get_cart())

    def _replace_with(self, server_cart: dict) -> None:
        self._lines = [
            {'product': _snapshot(item.get('product') or {'id': item['productId']}), 'quantity': item['quantity']}
            for item in server_cart['items']
        ]
        self._persist()

    def merge_on_login(self) -> bool:
        """
        Pushes the local lines the server cart lacks, then adopts the server
        cart. Returns False, leaving the local cart untouched, when the
        session check or the server cart read fails.
        """
        if not self.api:
            return False
        try:
            self.api.dashboard()
        except ApiError as e:
            logger.info("Cart merge skipped, no session: %s", e.message)
            return False
        self.authenticated = True

        try:
            server_cart = self._read_server_cart()
        except ApiError as e:
            logger.warning("Cart merge aborted, server cart unavailable: %s", e.message)
            return False

        server_quantities = {
            item['productId']: item['quantity'] for item in server_cart['items']
        }
        for product_id, delta in plan_cart_merge(self.quantities(), server_quantities).items():
            try:
                self.api.add_to_cart(product_id, delta)
            except ApiError as e:
                logger.warning("Cart merge skipped %s: %s", product_id, e.message)

        try:
            server_cart = self._read_server_cart()
        except ApiError as e:
            logger.warning("Cart merge could not re-read the server cart: %s", e.message)
            return False

        self._replace_with(server_cart)
        return True
