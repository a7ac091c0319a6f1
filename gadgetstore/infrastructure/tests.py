import io
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import cloudinary
from cloudinary.exceptions import Error as CloudinaryError
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework_simplejwt.tokens import AccessToken

from gadgetstore.catalog.models import Product as ProductModel
from gadgetstore.core.entities import Account, Order, OrderItem, Product, ShippingAddress
from gadgetstore.core.exceptions import ImageUploadError, OrderNotFoundError
from gadgetstore.infrastructure.gateways import (
    CloudinaryImageHost,
    InMemoryImageHost,
    TokenIssuer,
    build_image_host,
)
from gadgetstore.infrastructure.models import Account as AccountModel
from gadgetstore.infrastructure.repositories import (
    AccountRepositoryDjango,
    CartRepositoryDjango,
    OrderRepositoryDjango,
    ProductRepositoryDjango,
)
from gadgetstore.orders.models import Order as OrderModel


def create_product_model(**overrides):
    data = dict(
        name='Galaxy S24',
        description='Samsung flagship phone',
        brand='Samsung',
        category='smartphones',
        price=Decimal('799.00'),
        quantity=5,
        image_url='https://cdn.test/s24.png',
    )
    data.update(overrides)
    return ProductModel.objects.create(**data)


class AccountModelTestCase(TestCase):

    def test_create_user_normalizes_email_and_defaults(self):
        account = AccountModel.objects.create_user('Ada@Example.COM', 'secret123')

        self.assertEqual(account.email, 'ada@example.com')
        self.assertEqual(account.username, 'ada')
        self.assertEqual(account.role, 'user')
        self.assertTrue(account.check_password('secret123'))

    def test_create_user_without_password_is_unusable(self):
        account = AccountModel.objects.create_user('g@example.com', auth_provider='google')
        self.assertFalse(account.has_usable_password())

    def test_superuser_is_admin(self):
        account = AccountModel.objects.create_superuser('root@example.com', 'secret123')
        self.assertTrue(account.is_admin)
        self.assertTrue(account.is_staff)


class ProductRepositoryTestCase(TestCase):

    def setUp(self):
        self.repository = ProductRepositoryDjango()
        self.phone = create_product_model(featured=True, specs={'Display': '6.2"', 'Extra': 'x'})
        self.laptop = create_product_model(name='ThinkPad X1', brand='Lenovo', category='laptops',
                                           description='Business laptop')

    def test_find_by_id(self):
        """
        Scenario: an existing product comes back as an entity with normalized specs.
        """
        product = self.repository.find_by_id(str(self.phone.id))

        self.assertIsInstance(product, Product)
        self.assertEqual(product.name, 'Galaxy S24')
        self.assertEqual(product.specs, {'Display': '6.2"', 'Camera': '', 'Storage': '', 'Battery': ''})

    def test_find_by_id_unknown_or_malformed(self):
        self.assertIsNone(self.repository.find_by_id('5f0c8a4e-0000-4000-8000-000000000000'))
        self.assertIsNone(self.repository.find_by_id('not-a-uuid'))

    def test_search_filters(self):
        self.assertEqual(len(self.repository.search()), 2)
        self.assertEqual([p.name for p in self.repository.search(category='laptops')], ['ThinkPad X1'])
        self.assertEqual([p.name for p in self.repository.search(featured=True)], ['Galaxy S24'])
        self.assertEqual([p.name for p in self.repository.search(text='lenovo')], ['ThinkPad X1'])

    def test_save_creates_and_updates(self):
        entity = Product(name='iPad', description='Tablet', price=Decimal('599.00'),
                         category='tablets', brand='Apple', quantity=2)
        created = self.repository.save(entity)
        self.assertEqual(created.id, entity.id)
        self.assertEqual(self.repository.count(), 3)

        created.quantity = 7
        self.repository.save(created)
        self.assertEqual(ProductModel.objects.get(pk=entity.id).quantity, 7)
        self.assertEqual(self.repository.count(), 3)

    def test_set_quantity_and_delete(self):
        self.assertEqual(self.repository.set_quantity(str(self.laptop.id), 0).quantity, 0)
        self.assertTrue(self.repository.delete(str(self.laptop.id)))
        self.assertFalse(self.repository.delete(str(self.laptop.id)))
        self.assertFalse(self.repository.delete('not-a-uuid'))


class CartRepositoryTestCase(TestCase):

    def setUp(self):
        self.repository = CartRepositoryDjango()
        self.account = AccountModel.objects.create_user('buyer@example.com', 'secret123')
        self.account_id = str(self.account.id)
        self.product = create_product_model(price=Decimal('10.00'))

    def test_get_or_create_is_empty(self):
        cart = self.repository.get_or_create(self.account_id)
        self.assertEqual(cart.items, [])
        self.assertEqual(cart.account_id, self.account_id)

    def test_set_line_and_derived_totals(self):
        self.repository.set_line(self.account_id, str(self.product.id), 2)
        cart = self.repository.set_line(self.account_id, str(self.product.id), 3)

        self.assertEqual(len(cart.items), 1)
        self.assertEqual(cart.item_count, 3)
        self.assertEqual(cart.total, Decimal('30.00'))
        self.assertEqual(cart.items[0].product.name, 'Galaxy S24')

    def test_zero_quantity_removes_line(self):
        self.repository.set_line(self.account_id, str(self.product.id), 2)
        cart = self.repository.set_line(self.account_id, str(self.product.id), 0)
        self.assertEqual(cart.items, [])

    def test_remove_and_clear(self):
        other = create_product_model(name='Case', price=Decimal('5.00'))
        self.repository.set_line(self.account_id, str(self.product.id), 1)
        self.repository.set_line(self.account_id, str(other.id), 1)

        cart = self.repository.remove_line(self.account_id, str(self.product.id))
        self.assertEqual(list(cart.quantities()), [str(other.id)])

        self.assertEqual(self.repository.clear(self.account_id).items, [])


class OrderRepositoryTestCase(TestCase):

    def setUp(self):
        self.repository = OrderRepositoryDjango()
        self.account = AccountModel.objects.create_user('buyer@example.com', 'secret123')
        self.product = create_product_model()

    def _order(self, **overrides):
        data = dict(
            account_id=str(self.account.id),
            items=[OrderItem(product_id=str(self.product.id), product_name='Galaxy S24',
                             quantity=2, price=Decimal('799.00'))],
            total_amount=Decimal('1725.84'),
            subtotal=Decimal('1598.00'),
            shipping_address=ShippingAddress(full_name='Ada', phone='0788000000',
                                             district='Gasabo', city='Kigali'),
            payment_method='Card',
        )
        data.update(overrides)
        return Order(**data)

    def test_create_and_find(self):
        order = self.repository.create(self._order())

        self.assertEqual(order.order_status, 'pending')
        self.assertEqual(order.payment_status, 'unpaid')
        self.assertEqual(order.total_amount, Decimal('1725.84'))
        self.assertEqual(order.shipping_address.country, 'Rwanda')
        self.assertEqual(order.items[0].subtotal, Decimal('1598.00'))
        self.assertEqual(OrderModel.objects.get(pk=order.id).shipping_address['fullName'], 'Ada')

    def test_snapshot_survives_product_deletion(self):
        order = self.repository.create(self._order())
        product_id = str(self.product.id)
        self.product.delete()

        stored = self.repository.find_by_id(order.id)
        self.assertEqual(stored.items[0].product_id, product_id)
        self.assertEqual(stored.items[0].product_name, 'Galaxy S24')

    def test_update_status_changes_both_fields(self):
        order = self.repository.create(self._order())

        updated = self.repository.update_status(order.id, order_status='paid', payment_status='paid')

        self.assertEqual((updated.order_status, updated.payment_status), ('paid', 'paid'))
        with self.assertRaises(OrderNotFoundError):
            self.repository.update_status('5f0c8a4e-0000-4000-8000-000000000000', order_status='paid')

    def test_listing(self):
        first = self.repository.create(self._order())
        second = self.repository.create(self._order())
        other = AccountModel.objects.create_user('other@example.com', 'secret123')
        self.repository.create(self._order(account_id=str(other.id)))

        OrderModel.objects.filter(pk=first.id).update(created_at=timezone.now() - timedelta(days=40))

        mine = self.repository.list_by_account(str(self.account.id))
        self.assertEqual([o.id for o in mine], [second.id, first.id])
        self.assertEqual(len(self.repository.list_all()), 3)

        start = timezone.now() - timedelta(days=1)
        recent = self.repository.list_created_between(start, timezone.now() + timedelta(days=1))
        self.assertEqual(len(recent), 2)


class AccountRepositoryTestCase(TestCase):

    def setUp(self):
        self.repository = AccountRepositoryDjango()

    def test_create_keeps_entity_id_and_hashes_password(self):
        entity = Account(email='ada@example.com', username='ada', phone_number='0788000000')
        created = self.repository.create(entity, 'secret123')

        self.assertEqual(created.id, entity.id)
        self.assertNotEqual(AccountModel.objects.get(pk=entity.id).password, 'secret123')
        self.assertTrue(self.repository.check_password(created.id, 'secret123'))
        self.assertFalse(self.repository.check_password(created.id, 'wrong'))

    def test_email_lookups_ignore_case(self):
        created = self.repository.create(Account(email='ada@example.com', username='ada'), 'secret123')

        self.assertEqual(self.repository.find_by_email('ADA@example.com').id, created.id)
        self.assertTrue(self.repository.email_taken('Ada@Example.com'))
        self.assertFalse(self.repository.email_taken('ada@example.com', exclude_id=created.id))

    def test_update_profile_fields(self):
        created = self.repository.create(Account(email='ada@example.com', username='ada'), 'secret123')
        created.username = 'lovelace'
        created.phone_number = '0788999999'

        updated = self.repository.update(created)

        self.assertEqual(updated.username, 'lovelace')
        self.assertTrue(self.repository.check_password(created.id, 'secret123'))


# ====================================================================
# GATEWAYS
# ====================================================================

class CloudinaryImageHostTestCase(TestCase):

    def setUp(self):
        self.host = CloudinaryImageHost('demo', 'key-1', 'shh')

    def test_credentials_are_configured(self):
        self.assertEqual(cloudinary.config().cloud_name, 'demo')
        self.assertEqual(cloudinary.config().api_key, 'key-1')

    @patch('cloudinary.uploader.upload')
    def test_upload_returns_secure_url(self, mock_upload):
        mock_upload.return_value = {'secure_url': 'https://res/1.png'}
        image = io.BytesIO(b'image')

        url = self.host.upload(image, folder='products')

        self.assertEqual(url, 'https://res/1.png')
        args, kwargs = mock_upload.call_args
        self.assertIs(args[0], image)
        self.assertEqual(kwargs['folder'], 'products')

    @patch('cloudinary.uploader.upload')
    def test_upstream_status_is_propagated(self, mock_upload):
        mock_upload.return_value = {'error': {'message': 'Invalid Signature', 'http_code': 401}}

        with self.assertRaises(ImageUploadError) as ctx:
            self.host.upload(io.BytesIO(b'image'))

        self.assertEqual(ctx.exception.status_code, 401)
        self.assertIn('Invalid Signature', ctx.exception.message)

    @patch('cloudinary.uploader.upload')
    def test_sdk_failure_is_bad_gateway(self, mock_upload):
        mock_upload.side_effect = CloudinaryError('Unexpected error - connection refused')

        with self.assertRaises(ImageUploadError) as ctx:
            self.host.upload(io.BytesIO(b'image'))

        self.assertEqual(ctx.exception.status_code, 502)

    @patch('cloudinary.uploader.upload')
    def test_missing_url_is_bad_gateway(self, mock_upload):
        mock_upload.return_value = {'public_id': 'products/abc'}

        with self.assertRaises(ImageUploadError) as ctx:
            self.host.upload(io.BytesIO(b'image'))

        self.assertEqual(ctx.exception.status_code, 502)


class GatewayFactoryTestCase(TestCase):

    @override_settings(CLOUDINARY_CLOUD_NAME='')
    def test_in_memory_host_without_credentials(self):
        host = build_image_host()
        self.assertIsInstance(host, InMemoryImageHost)
        url = host.upload(io.BytesIO(b'image'), folder='products')
        self.assertTrue(url.startswith('https://images.local/products/'))
        self.assertEqual(host.uploads, [url])

    @override_settings(CLOUDINARY_CLOUD_NAME='demo', CLOUDINARY_API_KEY='k', CLOUDINARY_API_SECRET='s')
    def test_cloudinary_host_with_credentials(self):
        self.assertIsInstance(build_image_host(), CloudinaryImageHost)

    def test_token_carries_id_and_role(self):
        account = Account(email='admin@example.com', username='admin', role='admin')

        token = AccessToken(TokenIssuer().issue(account))

        self.assertEqual(token['id'], account.id)
        self.assertEqual(token['role'], 'admin')
