# gadgetstore/storefront/api_client.py
"""
HTTP client of the store API. The session cookie set at login is kept by the
underlying requests.Session and sent back on every call. Successful bodies
are checked against the shapes in `contracts` before they reach a store.
"""
import logging
from typing import Optional

import requests
from decouple import config

from . import contracts

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection and try again."
UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from the server."


class ApiError(Exception):
    """
    Failed API call. `status` is None when the server could not be reached;
    `message` is the server's message, fit to show to the shopper.
    """

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status
        self.message = message


def parse_response(contract, body, status: Optional[int] = None) -> dict:
    """Validated copy of `body`, or ApiError when it does not fit `contract`."""
    serializer = contract(data=body)
    if not serializer.is_valid():
        logger.warning("%s rejected a response: %s", contract.__name__, serializer.errors)
        raise ApiError(status, UNEXPECTED_RESPONSE_MESSAGE)
    return serializer.validated_data


class StoreApiClient:

    def __init__(self, base_url: str = None, session: requests.Session = None, timeout: int = 10):
        if base_url is None:
            base_url = config('STOREFRONT_API_URL', default='http://localhost:8000')
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, contract=contracts.MessageContract, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(None, NETWORK_ERROR_MESSAGE)

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            message = body.get('message') if isinstance(body, dict) else None
            raise ApiError(response.status_code, message or f"Request failed with status {response.status_code}")
        return parse_response(contract, body, response.status_code)

    # Accounts
    def login(self, email: str, password: str) -> dict:
        return self._request('POST', '/api/account/login', contracts.SessionContract,
                             json={'email': email, 'password': password})

    def logout(self) -> dict:
        return self._request('POST', '/api/account/logout')

    def dashboard(self) -> dict:
        """Session check; raises ApiError when there is no valid session."""
        return self._request('GET', '/api/dashboard', contracts.SessionContract)

    # Catalog
    def list_products(self, **filters) -> list:
        params = {key: value for key, value in filters.items() if value is not None}
        return self._request('GET', '/api/products', contracts.ProductListContract, params=params)['products']

    # Cart
    def get_cart(self) -> dict:
        return self._request('GET', '/api/cart', contracts.CartContract)

    def add_to_cart(self, product_id: str, quantity: int) -> dict:
        """Applies a quantity delta to one server line."""
        return self._request('POST', '/api/cart', contracts.CartContract,
                             json={'productId': product_id, 'quantity': quantity})

    def remove_from_cart(self, product_id: str) -> dict:
        return self._request('DELETE', f'/api/cart/{product_id}', contracts.CartContract)

    # Orders
    def place_order(self, payload: dict) -> dict:
        return self._request('POST', '/api/orders', contracts.PlacedOrderContract, json=payload)['order']
