# gadgetstore/core/tests.py

import unittest
from datetime import datetime
from decimal import Decimal
from unittest.mock import Mock

from gadgetstore.core.entities import Account, Order, OrderItem, Product, ShippingAddress
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
from gadgetstore.core.use_cases import (
    AdminOrderStatusUseCase,
    AuthenticateUseCase,
    CreateOrderUseCase,
    DashboardStatsUseCase,
    FindOrCreateOAuthAccountUseCase,
    ListOrdersUseCase,
    ManageCartUseCase,
    ManageProductsUseCase,
    OrderDetailUseCase,
    OrderTransitionsUseCase,
    RegisterAccountUseCase,
    UpdateProfileUseCase,
    calculate_order_totals,
    month_bounds,
    percent_change,
    plan_cart_merge,
    stock_status,
    validate_order_payload,
)
from gadgetstore.infrastructure.repositories import (
    InMemoryAccountRepository,
    InMemoryCartRepository,
    InMemoryOrderRepository,
    InMemoryProductRepository,
)


def make_product(**overrides) -> Product:
    data = dict(
        name='Pixel 8',
        description='Google phone',
        price=Decimal('25.00'),
        category='smartphones',
        brand='Google',
        image='https://images.local/products/pixel',
        quantity=10,
    )
    data.update(overrides)
    return Product(**data)


def make_address() -> ShippingAddress:
    return ShippingAddress(full_name='Ada Lovelace', phone='0788000000', district='Gasabo', city='Kigali')


def make_order(account_id, **overrides) -> Order:
    data = dict(
        account_id=account_id,
        items=[OrderItem(product_id='p-1', product_name='Pixel 8', quantity=1, price=Decimal('25.00'))],
        total_amount=Decimal('36.99'),
        shipping_address=make_address(),
        payment_method='Card',
    )
    data.update(overrides)
    return Order(**data)


# ====================================================================
# 1. CATALOG
# ====================================================================

class TestStockStatus(unittest.TestCase):

    def test_thresholds(self):
        self.assertEqual(stock_status(0), 'out-of-stock')
        self.assertEqual(stock_status(1), 'low-stock')
        self.assertEqual(stock_status(4), 'low-stock')
        self.assertEqual(stock_status(5), 'in-stock')


class TestManageProducts(unittest.TestCase):

    def setUp(self):
        self.product_repo = InMemoryProductRepository()
        self.image_host = Mock()
        self.image_host.upload.side_effect = lambda f, folder='products': f'https://cdn.test/{f}'
        self.use_case = ManageProductsUseCase(self.product_repo, self.image_host)
        self.data = {
            'name': 'Galaxy S24',
            'description': 'Flagship',
            'price': '799.00',
            'category': 'smartphones',
            'brand': 'Samsung',
            'quantity': '3',
            'specs': '{"Display": "6.2 inch", "Color": "black"}',
        }

    def test_create_uploads_images_and_saves(self):
        """
        Scenario: a complete form with a main image and two extra images.
        """
        product = self.use_case.create(self.data, main_image='main.png', additional_images=['a.png', 'b.png'])

        self.assertEqual(product.image, 'https://cdn.test/main.png')
        self.assertEqual(product.images, ['https://cdn.test/a.png', 'https://cdn.test/b.png'])
        self.assertEqual(product.price, Decimal('799.00'))
        self.assertEqual(product.quantity, 3)
        # Unknown specs entries are dropped, missing ones become empty
        self.assertEqual(product.specs, {'Display': '6.2 inch', 'Camera': '', 'Storage': '', 'Battery': ''})
        self.assertEqual(self.product_repo.count(), 1)

    def test_create_missing_fields(self):
        del self.data['brand']
        with self.assertRaisesRegex(InvalidDataError, 'Missing required fields'):
            self.use_case.create(self.data, main_image='main.png')

    def test_create_invalid_price(self):
        for price in ('abc', '0', '-5', 'NaN'):
            self.data['price'] = price
            with self.assertRaisesRegex(InvalidDataError, 'Invalid price'):
                self.use_case.create(self.data, main_image='main.png')

    def test_create_invalid_specs(self):
        self.data['specs'] = '{not json'
        with self.assertRaisesRegex(InvalidDataError, 'Invalid specs format'):
            self.use_case.create(self.data, main_image='main.png')

    def test_create_requires_main_image(self):
        with self.assertRaisesRegex(InvalidDataError, 'No main image provided'):
            self.use_case.create(self.data)
        self.image_host.upload.assert_not_called()

    def test_create_rejects_more_than_three_additional_images(self):
        with self.assertRaises(InvalidDataError):
            self.use_case.create(self.data, main_image='m.png', additional_images=['1', '2', '3', '4'])
        self.image_host.upload.assert_not_called()

    def test_update_keeps_existing_images_and_appends_uploads(self):
        product = self.product_repo.save(make_product(images=['https://old/1', 'https://old/2']))

        updated = self.use_case.update(
            product.id,
            {'price': '30'},
            additional_images=['new.png'],
            existing_additional_images=['https://old/2'],
        )

        self.assertEqual(updated.price, Decimal('30'))
        self.assertEqual(updated.images, ['https://old/2', 'https://cdn.test/new.png'])
        self.assertEqual(updated.image, product.image)

    def test_update_without_image_fields_leaves_images_alone(self):
        product = self.product_repo.save(make_product(images=['https://old/1']))
        updated = self.use_case.update(product.id, {'name': 'Pixel 8 Pro'})
        self.assertEqual(updated.name, 'Pixel 8 Pro')
        self.assertEqual(updated.images, ['https://old/1'])

    def test_update_unknown_product(self):
        with self.assertRaises(ProductNotFoundError):
            self.use_case.update('missing', {'name': 'x'})

    def test_delete_unknown_product(self):
        with self.assertRaisesRegex(ProductNotFoundError, 'Product not found'):
            self.use_case.delete('missing')

    def test_adjust_stock_and_report(self):
        low = self.product_repo.save(make_product(name='Low', quantity=10))
        self.product_repo.save(make_product(name='Out', quantity=0))
        self.product_repo.save(make_product(name='Plenty', quantity=50))

        self.assertEqual(self.use_case.adjust_stock(low.id, 2).quantity, 2)
        with self.assertRaises(InvalidDataError):
            self.use_case.adjust_stock(low.id, -1)

        report = self.use_case.stock_report()
        self.assertEqual(report['low_stock_count'], 1)
        self.assertEqual(report['out_of_stock_count'], 1)
        self.assertEqual(len(report['products']), 3)


# ====================================================================
# 2. CART
# ====================================================================

class TestPlanCartMerge(unittest.TestCase):

    def test_only_positive_deltas(self):
        deltas = plan_cart_merge({'a': 3, 'b': 1, 'c': 2}, {'a': 1, 'b': 5})
        self.assertEqual(deltas, {'a': 2, 'c': 2})


class TestManageCart(unittest.TestCase):

    def setUp(self):
        self.product_repo = InMemoryProductRepository()
        self.cart_repo = InMemoryCartRepository(self.product_repo)
        self.use_case = ManageCartUseCase(self.cart_repo, self.product_repo)
        self.product = self.product_repo.save(make_product())

    def test_add_creates_then_increments_line(self):
        self.use_case.add('acc-1', self.product.id, 2)
        cart = self.use_case.add('acc-1', self.product.id, 1)

        self.assertEqual(cart.item_count, 3)
        self.assertEqual(cart.total, Decimal('75.00'))

    def test_negative_delta_removes_line_at_zero(self):
        self.use_case.add('acc-1', self.product.id, 2)
        cart = self.use_case.add('acc-1', self.product.id, -2)
        self.assertEqual(cart.items, [])

    def test_add_rejects_zero_and_unknown_product(self):
        with self.assertRaisesRegex(InvalidDataError, 'non-zero'):
            self.use_case.add('acc-1', self.product.id, 0)
        with self.assertRaises(ProductNotFoundError):
            self.use_case.add('acc-1', 'missing', 1)

    def test_set_quantity_zero_removes(self):
        self.use_case.add('acc-1', self.product.id, 2)
        self.assertEqual(self.use_case.set_quantity('acc-1', self.product.id, 5).item_count, 5)
        self.assertEqual(self.use_case.set_quantity('acc-1', self.product.id, 0).items, [])

    def test_merge_never_decreases_and_skips_unknown(self):
        other = self.product_repo.save(make_product(name='Case', price=Decimal('5.00')))
        self.use_case.add('acc-1', self.product.id, 4)

        result = self.use_case.merge('acc-1', {self.product.id: 1, other.id: 2, 'gone': 3})

        self.assertEqual(result.cart.quantities(), {self.product.id: 4, other.id: 2})
        self.assertEqual(result.applied, {other.id: 2})
        self.assertEqual(result.skipped, ['gone'])


# ====================================================================
# 3. ORDERS
# ====================================================================

class TestValidateOrderPayload(unittest.TestCase):

    def setUp(self):
        self.payload = {
            'products': [{'product': 'p', 'quantity': 1, 'price': 10}],
            'totalAmount': 20.79,
            'shippingAddress': {'fullName': 'A', 'phone': '1', 'district': 'D', 'city': 'C'},
            'paymentMethod': 'Card',
        }

    def assertMessage(self, message):
        with self.assertRaises(InvalidDataError) as ctx:
            validate_order_payload(self.payload)
        self.assertEqual(ctx.exception.message, message)

    def test_valid_payload(self):
        validate_order_payload(self.payload)

    def test_messages_in_order(self):
        self.payload['products'] = []
        self.payload['totalAmount'] = 'abc'
        self.assertMessage('Products are required')

        self.payload['products'] = [{'product': 'p'}]
        self.assertMessage('totalAmount (number) is required')

        self.payload['totalAmount'] = 10
        self.payload['shippingAddress'] = {'fullName': 'A'}
        self.assertMessage('Complete shippingAddress is required')

        self.payload['shippingAddress'] = {'fullName': 'A', 'phone': '1', 'district': 'D', 'city': 'C'}
        del self.payload['paymentMethod']
        self.assertMessage('paymentMethod is required')

        self.payload['paymentMethod'] = 'Bitcoin'
        self.assertMessage('paymentMethod is not recognized')


class TestOrderTotals(unittest.TestCase):

    def test_flat_shipping_below_threshold(self):
        totals = calculate_order_totals(Decimal('50.00'), 'Standard')
        self.assertEqual(totals.total, Decimal('63.99'))
        self.assertEqual(calculate_order_totals(Decimal('50.00'), 'Express').shipping, Decimal('19.99'))
        self.assertEqual(calculate_order_totals(Decimal('50.00'), 'Pickup').shipping, Decimal('0.00'))

    def test_free_shipping_from_threshold(self):
        totals = calculate_order_totals(Decimal('100.00'), 'Express')
        self.assertEqual(totals.shipping, Decimal('0.00'))
        self.assertEqual(totals.total, Decimal('108.00'))


class TestCreateOrder(unittest.TestCase):

    def setUp(self):
        self.product_repo = InMemoryProductRepository()
        self.order_repo = InMemoryOrderRepository()
        self.product = self.product_repo.save(make_product())
        self.lines = [{'product': self.product.id, 'quantity': 2, 'price': 25.0}]

    def test_creates_pending_snapshot(self):
        use_case = CreateOrderUseCase(self.order_repo, self.product_repo)

        order = use_case.execute('acc-1', self.lines, 63.99, make_address(), 'Card')

        self.assertEqual(order.order_status, 'pending')
        self.assertEqual(order.payment_status, 'unpaid')
        self.assertEqual(order.total_amount, Decimal('63.99'))
        self.assertEqual(order.subtotal, Decimal('50.0'))
        self.assertEqual(order.items[0].product_name, 'Pixel 8')
        self.assertEqual(self.order_repo.count(), 1)
        # No inventory decrement on checkout
        self.assertEqual(self.product_repo.find_by_id(self.product.id).quantity, 10)

    def test_line_price_is_copied_not_referenced(self):
        use_case = CreateOrderUseCase(self.order_repo, self.product_repo)
        order = use_case.execute('acc-1', self.lines, 63.99, make_address(), 'Card')

        self.product_repo.save(make_product(id=self.product.id, price=Decimal('99.00')))

        stored = self.order_repo.find_by_id(order.id)
        self.assertEqual(stored.items[0].price, Decimal('25.0'))

    def test_unknown_product_line(self):
        use_case = CreateOrderUseCase(self.order_repo, self.product_repo)
        with self.assertRaisesRegex(InvalidDataError, 'Product line 1'):
            use_case.execute('acc-1', [{'product': 'nope', 'quantity': 1, 'price': 1}],
                             10, make_address(), 'Card')

    def test_total_mismatch_rejected_when_verification_on(self):
        use_case = CreateOrderUseCase(self.order_repo, self.product_repo, verify_total=True)
        with self.assertRaisesRegex(InvalidDataError, 'totalAmount does not match'):
            use_case.execute('acc-1', self.lines, 10, make_address(), 'Card')
        self.assertEqual(self.order_repo.count(), 0)

    def test_total_mismatch_only_logged_when_verification_off(self):
        use_case = CreateOrderUseCase(self.order_repo, self.product_repo)
        with self.assertLogs('gadgetstore.core.use_cases', level='WARNING'):
            order = use_case.execute('acc-1', self.lines, 10, make_address(), 'Card')
        self.assertEqual(order.total_amount, Decimal('10.00'))


class TestOrderAccess(unittest.TestCase):

    def setUp(self):
        self.order_repo = InMemoryOrderRepository()
        self.owner = Account(email='owner@test.com', username='owner')
        self.stranger = Account(email='x@test.com', username='x')
        self.admin = Account(email='admin@test.com', username='admin', role='admin')
        self.order = self.order_repo.create(make_order(self.owner.id))

    def test_detail_owner_or_admin(self):
        use_case = OrderDetailUseCase(self.order_repo)
        self.assertEqual(use_case.execute(self.order.id, self.owner).id, self.order.id)
        self.assertEqual(use_case.execute(self.order.id, self.admin).id, self.order.id)
        with self.assertRaises(NotAuthorizedError):
            use_case.execute(self.order.id, self.stranger)

    def test_detail_bad_and_unknown_ids(self):
        use_case = OrderDetailUseCase(self.order_repo)
        with self.assertRaisesRegex(InvalidDataError, 'Invalid order id'):
            use_case.execute('not-a-uuid', self.owner)
        with self.assertRaises(OrderNotFoundError):
            use_case.execute('5f0c8a4e-0000-4000-8000-000000000000', self.owner)

    def test_all_orders_requires_admin(self):
        use_case = ListOrdersUseCase(self.order_repo)
        self.assertEqual(len(use_case.all_orders(self.admin)), 1)
        self.assertEqual(len(use_case.mine(self.owner)), 1)
        self.assertEqual(use_case.mine(self.stranger), [])
        with self.assertRaises(NotAuthorizedError):
            use_case.all_orders(self.owner)


class TestOrderTransitions(unittest.TestCase):

    def setUp(self):
        self.order_repo = InMemoryOrderRepository()
        self.owner = Account(email='owner@test.com', username='owner')
        self.admin = Account(email='admin@test.com', username='admin', role='admin')
        self.order = self.order_repo.create(make_order(self.owner.id))
        self.use_case = OrderTransitionsUseCase(self.order_repo)

    def test_cancel_pending(self):
        order = self.use_case.cancel(self.order.id, self.owner)
        self.assertEqual(order.order_status, 'cancelled')

        with self.assertRaisesRegex(InvalidTransitionError, 'Only pending orders can be cancelled'):
            self.use_case.cancel(self.order.id, self.owner)

    def test_pay_sets_both_statuses_once(self):
        order = self.use_case.pay(self.order.id, self.owner)
        self.assertEqual((order.order_status, order.payment_status), ('paid', 'paid'))

        with self.assertRaisesRegex(InvalidTransitionError, 'Order already paid'):
            self.use_case.pay(self.order.id, self.owner)

    def test_cancelled_order_cannot_be_paid(self):
        self.use_case.cancel(self.order.id, self.owner)

        with self.assertRaisesRegex(InvalidTransitionError, 'Cancelled orders cannot be paid'):
            self.use_case.pay(self.order.id, self.owner)

        stored = self.order_repo.find_by_id(self.order.id)
        self.assertEqual((stored.order_status, stored.payment_status), ('cancelled', 'unpaid'))

    def test_only_owner_may_transition(self):
        with self.assertRaises(NotAuthorizedError):
            self.use_case.cancel(self.order.id, self.admin)
        with self.assertRaises(NotAuthorizedError):
            self.use_case.pay(self.order.id, self.admin)

    def test_admin_fulfilment_steps(self):
        admin_use_case = AdminOrderStatusUseCase(self.order_repo)
        with self.assertRaises(InvalidTransitionError):
            admin_use_case.set_status(self.order.id, 'delivered')

        self.use_case.pay(self.order.id, self.owner)
        self.assertEqual(admin_use_case.set_status(self.order.id, 'delivered').order_status, 'delivered')
        self.assertEqual(admin_use_case.set_status(self.order.id, 'completed').order_status, 'completed')


# ====================================================================
# 4. ACCOUNTS
# ====================================================================

class TestAccounts(unittest.TestCase):

    def setUp(self):
        self.account_repo = InMemoryAccountRepository()
        self.register = RegisterAccountUseCase(self.account_repo)
        self.authenticate = AuthenticateUseCase(self.account_repo)

    def test_register_validations(self):
        with self.assertRaisesRegex(InvalidDataError, 'All fields'):
            self.register.execute('ada', 'ada@test.com', 'secret123', '')
        with self.assertRaisesRegex(InvalidDataError, 'Password must be at least 8'):
            self.register.execute('ada', 'ada@test.com', 'short', '0788000000')
        with self.assertRaisesRegex(InvalidDataError, 'phoneNumber must be at least 8'):
            self.register.execute('ada', 'ada@test.com', 'secret123', '0788')

    def test_register_then_login(self):
        account = self.register.execute('ada', 'Ada@Test.com', 'secret123', '0788000000')
        self.assertEqual(account.role, 'user')
        self.assertEqual(account.email, 'ada@test.com')

        with self.assertRaises(ConflictError):
            self.register.execute('ada2', 'ada@test.com', 'secret123', '0788000000')

        self.assertEqual(self.authenticate.execute('ada@test.com', 'secret123').id, account.id)
        with self.assertRaises(InvalidCredentialsError):
            self.authenticate.execute('ada@test.com', 'wrong-password')
        with self.assertRaises(AccountNotFoundError):
            self.authenticate.execute('nobody@test.com', 'secret123')
        with self.assertRaisesRegex(InvalidDataError, 'Both email and password'):
            self.authenticate.execute('ada@test.com', '')

    def test_oauth_accounts(self):
        oauth = FindOrCreateOAuthAccountUseCase(self.account_repo)
        account = oauth.execute('G@Test.com', 'Grace', 'Hopper')
        self.assertEqual(account.username, 'Grace Hopper')
        self.assertEqual(account.auth_provider, 'google')
        self.assertEqual(oauth.execute('g@test.com').id, account.id)

        with self.assertRaisesRegex(InvalidDataError, 'only log in using Google'):
            self.authenticate.execute('g@test.com', 'anything1')

        update = UpdateProfileUseCase(self.account_repo)
        with self.assertRaisesRegex(InvalidDataError, 'Google accounts can only update phoneNumber'):
            update.execute(account.id, username='Someone')
        self.assertEqual(update.execute(account.id, phone_number='0788111222').phone_number, '0788111222')

    def test_update_profile_email_conflict(self):
        first = self.register.execute('a', 'a@test.com', 'secret123', '0788000000')
        self.register.execute('b', 'b@test.com', 'secret123', '0788000000')
        update = UpdateProfileUseCase(self.account_repo)

        with self.assertRaises(ConflictError):
            update.execute(first.id, email='B@test.com')
        self.assertEqual(update.execute(first.id, username='alpha').username, 'alpha')


# ====================================================================
# 5. DASHBOARD
# ====================================================================

class TestDashboardStats(unittest.TestCase):

    def test_month_bounds_wraps_year(self):
        previous, current, following = month_bounds(datetime(2025, 1, 20, 13, 5))
        self.assertEqual(previous, datetime(2024, 12, 1))
        self.assertEqual(current, datetime(2025, 1, 1))
        self.assertEqual(following, datetime(2025, 2, 1))

    def test_percent_change(self):
        self.assertEqual(percent_change(150, 100), 50.0)
        self.assertEqual(percent_change(5, 0), 0.0)

    def test_month_over_month(self):
        order_repo = InMemoryOrderRepository()
        product_repo = InMemoryProductRepository()
        account_repo = InMemoryAccountRepository()
        product_repo.save(make_product())
        account_repo.create(Account(email='a@test.com', username='a'), 'secret123')

        def item(quantity):
            return [OrderItem(product_id='p-1', product_name='Pixel 8', quantity=quantity, price=Decimal('25'))]

        order_repo.create(make_order('a', items=item(2), total_amount=Decimal('100'), order_status='paid',
                                     payment_status='paid', created_at=datetime(2025, 3, 2)))
        order_repo.create(make_order('a', items=item(1), total_amount=Decimal('50'),
                                     created_at=datetime(2025, 3, 5)))
        order_repo.create(make_order('a', items=item(1), total_amount=Decimal('50'), order_status='paid',
                                     payment_status='paid', created_at=datetime(2025, 2, 10)))

        stats = DashboardStatsUseCase(order_repo, product_repo, account_repo).execute(now=datetime(2025, 3, 15))

        self.assertEqual(stats['total_revenue'], Decimal('100'))
        self.assertEqual(stats['revenue_change'], 100.0)
        self.assertEqual(stats['total_orders'], 2)
        self.assertEqual(stats['orders_change'], 100.0)
        self.assertEqual(stats['products_sold'], 3)
        self.assertEqual(stats['products_sold_change'], 200.0)
        self.assertEqual(stats['conversion_rate'], 50.0)
        self.assertEqual(stats['conversion_rate_change'], -50.0)
        self.assertEqual(stats['order_count'], 3)
        self.assertEqual(stats['account_count'], 1)
        self.assertEqual(stats['top_products'], [{'product': 'p-1', 'name': 'Pixel 8', 'units_sold': 4}])
