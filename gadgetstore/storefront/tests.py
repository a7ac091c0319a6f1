import os
import tempfile
import unittest
from decimal import Decimal
from unittest.mock import Mock

import requests

from gadgetstore.storefront.api_client import (
    NETWORK_ERROR_MESSAGE,
    UNEXPECTED_RESPONSE_MESSAGE,
    ApiError,
    StoreApiClient,
)
from gadgetstore.storefront.cart_store import CART_KEY, CartStore
from gadgetstore.storefront.preferences import PreferencesStore
from gadgetstore.storefront.storage import JsonFileStorage, MemoryStorage

PHONE = {'id': 'p1', 'name': 'Galaxy S24', 'price': 25.0, 'imageUrl': 'https://cdn/s24.png', 'quantity': 9}
CASE = {'id': 'p2', 'name': 'Phone case', 'price': 5.5}
CHARGER = {'id': 'p3', 'name': 'Charger', 'price': 19.99}


def server_cart(*lines):
    return {'items': [
        {'productId': product['id'], 'product': product, 'quantity': quantity}
        for product, quantity in lines
    ]}


class TestCartStoreLocal(unittest.TestCase):

    def setUp(self):
        self.storage = MemoryStorage()
        self.store = CartStore(self.storage)

    def test_add_appends_then_increments(self):
        self.store.add(PHONE)
        self.store.add(PHONE, 2)
        self.store.add(CASE)

        self.assertEqual(self.store.quantities(), {'p1': 3, 'p2': 1})
        self.assertEqual(self.store.item_count, 4)
        self.assertEqual(self.store.total, Decimal('80.50'))

    def test_snapshot_drops_extra_fields(self):
        self.store.add(PHONE)
        self.assertNotIn('quantity', self.store.items[0]['product'])

    def test_set_quantity_and_remove(self):
        self.store.add(PHONE)
        self.store.add(CASE)

        self.store.set_quantity('p1', 4)
        self.assertEqual(self.store.quantities()['p1'], 4)

        self.store.set_quantity('p1', 0)
        self.assertEqual(self.store.quantities(), {'p2': 1})

        self.store.remove('p2')
        self.assertEqual(self.store.items, [])
        self.assertEqual(self.store.total, Decimal('0.00'))

    def test_state_is_persisted(self):
        self.store.add(PHONE, 2)

        reloaded = CartStore(self.storage)

        self.assertEqual(reloaded.quantities(), {'p1': 2})
        self.store.clear()
        self.assertEqual(self.storage.load(CART_KEY), [])

    def test_unusable_stored_lines_are_skipped(self):
        storage = MemoryStorage({CART_KEY: [
            {'product': None, 'quantity': 1},
            {'product': {'id': 'p1'}, 'quantity': 'two'},
            {'product': {'id': 'p2'}, 'quantity': 2.5},
            {'product': {'id': 'p3', 'price': 19.99}, 'quantity': 2},
            'garbage',
        ]})

        store = CartStore(storage)

        self.assertEqual(store.quantities(), {'p3': 2})
        self.assertEqual(store.total, Decimal('39.98'))

    def test_stored_value_that_is_not_a_list(self):
        self.assertEqual(CartStore(MemoryStorage({CART_KEY: {'p1': 1}})).items, [])

    def test_guest_mutations_are_not_mirrored(self):
        api = Mock(spec=StoreApiClient)
        store = CartStore(self.storage, api)
        store.add(PHONE)
        api.add_to_cart.assert_not_called()


class TestCartStoreMirroring(unittest.TestCase):

    def setUp(self):
        self.api = Mock(spec=StoreApiClient)
        self.store = CartStore(MemoryStorage(), self.api)
        self.store.authenticated = True

    def test_mutations_are_sent_as_deltas(self):
        self.store.add(PHONE, 2)
        self.api.add_to_cart.assert_called_with('p1', 2)

        self.store.set_quantity('p1', 5)
        self.api.add_to_cart.assert_called_with('p1', 3)

        self.store.set_quantity('p1', 1)
        self.api.add_to_cart.assert_called_with('p1', -4)

        self.store.remove('p1')
        self.api.remove_from_cart.assert_called_once_with('p1')

    def test_failures_are_logged_not_raised(self):
        self.api.add_to_cart.side_effect = ApiError(500, 'Internal server error')

        with self.assertLogs('gadgetstore.storefront.cart_store', level='WARNING'):
            self.store.add(PHONE)

        self.assertEqual(self.store.quantities(), {'p1': 1})


class TestMergeOnLogin(unittest.TestCase):

    def setUp(self):
        self.api = Mock(spec=StoreApiClient)
        self.store = CartStore(MemoryStorage(), self.api)
        self.store.add(PHONE, 1)
        self.store.add(CASE, 2)

    def test_no_session_keeps_local_cart(self):
        self.api.dashboard.side_effect = ApiError(401, 'No token provided')

        self.assertFalse(self.store.merge_on_login())

        self.assertFalse(self.store.authenticated)
        self.assertEqual(self.store.quantities(), {'p1': 1, 'p2': 2})
        self.api.add_to_cart.assert_not_called()

    def test_pushes_positive_deltas_and_adopts_server_cart(self):
        self.api.get_cart.side_effect = [
            server_cart((PHONE, 3)),
            server_cart((PHONE, 3), (CASE, 2), (CHARGER, 1)),
        ]

        self.assertTrue(self.store.merge_on_login())

        # The server already holds more phones, so only the cases are pushed
        self.api.add_to_cart.assert_called_once_with('p2', 2)
        self.assertTrue(self.store.authenticated)
        self.assertEqual(self.store.quantities(), {'p1': 3, 'p2': 2, 'p3': 1})

    def test_per_item_failures_are_isolated(self):
        self.store.add(CHARGER, 1)
        self.api.get_cart.side_effect = [server_cart(), server_cart((PHONE, 1), (CHARGER, 1))]
        self.api.add_to_cart.side_effect = [None, ApiError(404, 'Product not found'), None]

        self.assertTrue(self.store.merge_on_login())

        self.assertEqual(self.api.add_to_cart.call_count, 3)
        self.assertEqual(self.store.quantities(), {'p1': 1, 'p3': 1})

    def test_malformed_server_cart_keeps_local_cart(self):
        self.api.get_cart.return_value = {'items': [{'id': 'p1', 'quantity': 1}]}

        with self.assertLogs('gadgetstore.storefront', level='WARNING'):
            self.assertFalse(self.store.merge_on_login())

        self.assertEqual(self.store.quantities(), {'p1': 1, 'p2': 2})
        self.api.add_to_cart.assert_not_called()

    def test_network_failure_keeps_local_cart(self):
        self.api.get_cart.side_effect = ApiError(None, NETWORK_ERROR_MESSAGE)

        self.assertFalse(self.store.merge_on_login())

        self.assertEqual(self.store.quantities(), {'p1': 1, 'p2': 2})


class TestStorage(unittest.TestCase):

    def test_json_file_round_trip(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'state', 'storefront.json')
            storage = JsonFileStorage(path)

            self.assertIsNone(storage.load('theme'))
            storage.save('theme', 'dark')
            storage.save(CART_KEY, [{'product': {'id': 'p1'}, 'quantity': 2}])

            reopened = JsonFileStorage(path)
            self.assertEqual(reopened.load('theme'), 'dark')
            self.assertEqual(reopened.load(CART_KEY)[0]['quantity'], 2)

            reopened.delete('theme')
            self.assertEqual(JsonFileStorage(path).load('theme', 'light'), 'light')

    def test_decimal_prices_are_written(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'storefront.json')
            store = CartStore(JsonFileStorage(path))
            store.add(dict(PHONE, price=Decimal('25.00')), 2)

            reloaded = CartStore(JsonFileStorage(path))

            self.assertEqual(reloaded.total, Decimal('50.00'))

    def test_unreadable_file_reads_as_empty(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'broken.json')
            with open(path, 'w') as fh:
                fh.write('{not json')

            self.assertEqual(JsonFileStorage(path).load(CART_KEY, []), [])

    def test_memory_storage_returns_copies(self):
        storage = MemoryStorage()
        value = {'a': [1]}
        storage.save('k', value)
        value['a'].append(2)
        self.assertEqual(storage.load('k'), {'a': [1]})


class TestPreferencesStore(unittest.TestCase):

    def test_defaults_to_system_preference(self):
        self.assertEqual(PreferencesStore(MemoryStorage()).theme, 'light')
        self.assertEqual(PreferencesStore(MemoryStorage(), system_prefers_dark=True).theme, 'dark')

    def test_toggle_is_persisted(self):
        storage = MemoryStorage()
        preferences = PreferencesStore(storage)

        self.assertEqual(preferences.toggle_theme(), 'dark')
        self.assertEqual(PreferencesStore(storage).theme, 'dark')
        self.assertEqual(preferences.toggle_theme(), 'light')

    def test_unknown_theme(self):
        with self.assertRaises(ValueError):
            PreferencesStore(MemoryStorage()).set_theme('sepia')


class TestStoreApiClient(unittest.TestCase):

    def setUp(self):
        self.session = Mock(spec=requests.Session)
        self.client = StoreApiClient(base_url='http://api.test/', session=self.session)

    def test_successful_call(self):
        self.session.request.return_value = Mock(
            status_code=200, json=Mock(return_value={'success': True, 'products': [PHONE]})
        )

        products = self.client.list_products(category='smartphones', featured=None)

        self.assertEqual(products, [PHONE])
        self.session.request.assert_called_once_with(
            'GET', 'http://api.test/api/products', timeout=10, params={'category': 'smartphones'}
        )

    def test_server_message_is_surfaced(self):
        self.session.request.return_value = Mock(
            status_code=400, json=Mock(return_value={'success': False, 'message': 'Products are required'})
        )

        with self.assertRaises(ApiError) as ctx:
            self.client.place_order({})

        self.assertEqual(ctx.exception.status, 400)
        self.assertEqual(ctx.exception.message, 'Products are required')

    def test_malformed_body_is_api_error(self):
        self.session.request.return_value = Mock(
            status_code=200, json=Mock(return_value={'items': [{'id': 'p1', 'quantity': 1}]})
        )

        with self.assertRaises(ApiError) as ctx:
            self.client.get_cart()

        self.assertEqual(ctx.exception.status, 200)
        self.assertEqual(ctx.exception.message, UNEXPECTED_RESPONSE_MESSAGE)

    def test_cart_body_is_validated(self):
        self.session.request.return_value = Mock(
            status_code=200, json=Mock(return_value=dict(server_cart((PHONE, 2)), itemCount=2, total=50.0))
        )

        cart = self.client.get_cart()

        self.assertEqual(cart['items'][0]['productId'], 'p1')
        self.assertEqual(cart['items'][0]['quantity'], 2)
        self.assertEqual(cart['items'][0]['product']['name'], 'Galaxy S24')

    def test_network_error(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError('refused')

        with self.assertRaises(ApiError) as ctx:
            self.client.dashboard()

        self.assertIsNone(ctx.exception.status)
        self.assertEqual(ctx.exception.message, NETWORK_ERROR_MESSAGE)
