import json
from decimal import Decimal

from django.conf import settings
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from gadgetstore.catalog.models import Product as ProductModel
from gadgetstore.infrastructure.gateways import TokenIssuer
from gadgetstore.infrastructure.mappers import AccountMapper
from gadgetstore.infrastructure.models import Account as AccountModel
from gadgetstore.orders.models import Order as OrderModel


class StoreAPITestCase(APITestCase):
    """Shared fixtures: a customer, an administrator and one product."""

    def setUp(self):
        self.customer = AccountModel.objects.create_user(
            'buyer@example.com', 'secret123', username='buyer', phone_number='0788000000'
        )
        self.admin = AccountModel.objects.create_superuser('admin@example.com', 'secret123')
        self.product = ProductModel.objects.create(
            name='Galaxy S24',
            description='Samsung flagship phone',
            brand='Samsung',
            category='smartphones',
            price=Decimal('25.00'),
            quantity=10,
            image_url='https://cdn.test/s24.png',
        )

    def login_as(self, account_model):
        token = TokenIssuer().issue(AccountMapper.to_entity(account_model))
        self.client.cookies[settings.JWT_COOKIE_NAME] = token

    def order_payload(self, **overrides):
        payload = {
            'products': [{'product': str(self.product.id), 'quantity': 2, 'price': 25.0}],
            'totalAmount': 63.99,
            'shippingAddress': {
                'fullName': 'Ada Lovelace', 'phone': '0788000000', 'district': 'Gasabo', 'city': 'Kigali',
            },
            'paymentMethod': 'Card',
        }
        payload.update(overrides)
        return payload


# ====================================================================
# 1. AUTHENTICATION
# ====================================================================

class AuthenticationTests(StoreAPITestCase):

    def test_missing_token_is_401(self):
        response = self.client.get(reverse('order_list'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'success': False, 'message': 'No token provided'})

    def test_invalid_token_is_403(self):
        self.client.cookies[settings.JWT_COOKIE_NAME] = 'not-a-token'
        response = self.client.get(reverse('order_list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['message'], 'Failed to authenticate token')

    def test_bearer_header_is_accepted(self):
        token = TokenIssuer().issue(AccountMapper.to_entity(self.customer))
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = self.client.get(reverse('dashboard'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['email'], 'buyer@example.com')

    def test_register_login_logout(self):
        response = self.client.post(reverse('account_register'), {
            'username': 'ada', 'email': 'Ada@Example.com', 'password': 'secret123', 'phoneNumber': '0788111222',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'User account created successfully.')
        self.assertEqual(AccountModel.objects.get(email='ada@example.com').role, 'user')

        response = self.client.post(reverse('account_login'), {
            'email': 'ada@example.com', 'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['username'], 'ada')
        cookie = response.cookies[settings.JWT_COOKIE_NAME]
        self.assertTrue(cookie['httponly'])
        self.assertNotIn('token', response.data)

        response = self.client.get(reverse('dashboard'))
        self.assertEqual(response.data['message'], 'Welcome to the dashboard')

        response = self.client.post(reverse('account_logout'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.cookies[settings.JWT_COOKIE_NAME].value, '')

    def test_register_errors(self):
        response = self.client.post(reverse('account_register'), {'email': 'x@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'All fields username, email, password, phoneNumber are required.')

        response = self.client.post(reverse('account_register'), {
            'username': 'dup', 'email': 'buyer@example.com', 'password': 'secret123', 'phoneNumber': '0788111222',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_wrong_typed_fields_are_rejected(self):
        response = self.client.post(reverse('account_register'), {
            'username': 'ada', 'email': 123, 'password': 'secret123', 'phoneNumber': '0788111222',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['success'], False)
        self.assertTrue(response.data['message'].startswith('email:'))

        response = self.client.post(reverse('account_register'), {
            'username': 'ada', 'email': 'not-an-address', 'password': 'secret123', 'phoneNumber': '0788111222',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(AccountModel.objects.filter(username='ada').exists())

        response = self.client.post(reverse('account_login'), {'email': ['x'], 'password': 'secret123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['message'].startswith('email:'))

        self.login_as(self.customer)
        response = self.client.patch(reverse('account_update'), {'phoneNumber': {'a': 1}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['message'].startswith('phoneNumber:'))

    def test_login_errors(self):
        url = reverse('account_login')
        response = self.client.post(url, {'email': 'nobody@example.com', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'User with this email does not exist')

        response = self.client.post(url, {'email': 'buyer@example.com', 'password': 'wrong-pass'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Incorrect password')

        AccountModel.objects.create_user('g@example.com', auth_provider='google')
        response = self.client.post(url, {'email': 'g@example.com', 'password': 'whatever1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'This user can only log in using Google')

    def test_update_profile(self):
        self.login_as(self.customer)
        response = self.client.put(reverse('account_update'), {'phoneNumber': '0788999888'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['phoneNumber'], '0788999888')

        response = self.client.patch(reverse('account_update'), {'email': 'admin@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)


# ====================================================================
# 2. CATALOG
# ====================================================================

class CatalogTests(StoreAPITestCase):

    def test_public_listing_and_filters(self):
        ProductModel.objects.create(name='ThinkPad', description='Laptop', brand='Lenovo',
                                    category='laptops', price=Decimal('999.00'), featured=True)
        # A stale cookie does not block public reads
        self.client.cookies[settings.JWT_COOKIE_NAME] = 'expired'

        response = self.client.get(reverse('product_list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(len(response.data['products']), 2)

        response = self.client.get(reverse('product_list'), {'category': 'laptops'})
        self.assertEqual([p['name'] for p in response.data['products']], ['ThinkPad'])

        response = self.client.get(reverse('product_list'), {'featured': 'true'})
        self.assertEqual([p['name'] for p in response.data['products']], ['ThinkPad'])

        response = self.client.get(reverse('product_list'), {'search': 'samsung'})
        self.assertEqual([p['name'] for p in response.data['products']], ['Galaxy S24'])

    def test_detail(self):
        response = self.client.get(reverse('product_detail', args=[self.product.id]))
        self.assertEqual(response.data['product']['imageUrl'], 'https://cdn.test/s24.png')
        self.assertTrue(response.data['product']['inStock'])

        response = self.client.get(reverse('product_detail', args=['missing']))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Product not found')

    @override_settings(CLOUDINARY_CLOUD_NAME='')
    def test_admin_creates_product_with_images(self):
        self.login_as(self.admin)
        response = self.client.post(reverse('product_add'), {
            'name': 'Pixel 8',
            'description': 'Google phone',
            'price': '699.00',
            'originalPrice': '799.00',
            'category': 'smartphones',
            'brand': 'Google',
            'quantity': '4',
            'featured': 'true',
            'specs': json.dumps({'Display': '6.2"'}),
            'image': SimpleUploadedFile('main.png', b'main', content_type='image/png'),
            'additionalImages': [
                SimpleUploadedFile('a.png', b'a', content_type='image/png'),
                SimpleUploadedFile('b.png', b'b', content_type='image/png'),
            ],
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = response.data['product']
        self.assertEqual(response.data['message'], 'Product created successfully')
        self.assertEqual(product['price'], 699.0)
        self.assertEqual(product['discountPercent'], 13)
        self.assertEqual(len(product['images']), 2)
        self.assertTrue(product['featured'])
        self.assertEqual(product['specs']['Display'], '6.2"')

    def test_create_requires_main_image(self):
        self.login_as(self.admin)
        response = self.client.post(reverse('product_add'), {
            'name': 'Pixel 8', 'description': 'Google phone', 'price': '699',
            'category': 'smartphones', 'brand': 'Google',
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'No main image provided')

    def test_writes_require_admin(self):
        response = self.client.delete(reverse('product_detail', args=[self.product.id]))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.login_as(self.customer)
        response = self.client.delete(reverse('product_detail', args=[self.product.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_updates_and_deletes(self):
        self.login_as(self.admin)
        url = reverse('product_detail', args=[self.product.id])

        response = self.client.put(url, {'price': '30.00', 'quantity': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['product']['price'], 30.0)
        self.assertFalse(response.data['product']['inStock'])

        response = self.client.delete(url)
        self.assertEqual(response.data, {'success': True, 'message': 'Product deleted'})
        self.assertFalse(ProductModel.objects.filter(pk=self.product.id).exists())


# ====================================================================
# 3. CART
# ====================================================================

class CartTests(StoreAPITestCase):

    def setUp(self):
        super().setUp()
        self.login_as(self.customer)

    def test_add_update_remove(self):
        response = self.client.post(reverse('cart'), {'productId': str(self.product.id), 'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['itemCount'], 2)
        self.assertEqual(response.data['total'], 50.0)

        response = self.client.patch(reverse('cart_item', args=[self.product.id]), {'quantity': 5}, format='json')
        self.assertEqual(response.data['itemCount'], 5)

        response = self.client.delete(reverse('cart_item', args=[self.product.id]))
        self.assertEqual(response.data['items'], [])

    def test_add_unknown_product(self):
        response = self.client.post(reverse('cart'), {'productId': 'missing', 'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_merge_is_additive(self):
        self.client.post(reverse('cart'), {'productId': str(self.product.id), 'quantity': 3}, format='json')

        response = self.client.post(reverse('cart_merge'), {'items': [
            {'productId': str(self.product.id), 'quantity': 1},
            {'productId': 'gone', 'quantity': 2},
        ]}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['itemCount'], 3)
        self.assertEqual(response.data['applied'], {})
        self.assertEqual(response.data['skipped'], ['gone'])

    def test_clear(self):
        self.client.post(reverse('cart'), {'productId': str(self.product.id)}, format='json')
        response = self.client.delete(reverse('cart'))
        self.assertEqual(response.data['itemCount'], 0)


# ====================================================================
# 4. ORDERS
# ====================================================================

class OrderTests(StoreAPITestCase):

    def place_order(self):
        self.login_as(self.customer)
        response = self.client.post(reverse('order_list'), self.order_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data['order']

    def test_create_order(self):
        order = self.place_order()

        self.assertEqual(order['orderStatus'], 'pending')
        self.assertEqual(order['paymentStatus'], 'unpaid')
        self.assertEqual(order['totalAmount'], 63.99)
        self.assertEqual(order['shippingAddress']['country'], 'Rwanda')
        self.assertEqual(order['products'][0]['name'], 'Galaxy S24')
        self.assertEqual(order['account'], str(self.customer.id))

    def test_validation_messages(self):
        self.login_as(self.customer)
        url = reverse('order_list')

        response = self.client.post(url, self.order_payload(products=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Products are required')

        response = self.client.post(url, self.order_payload(totalAmount='12'), format='json')
        self.assertEqual(response.data['message'], 'totalAmount (number) is required')

        response = self.client.post(url, self.order_payload(shippingAddress={'fullName': 'A'}), format='json')
        self.assertEqual(response.data['message'], 'Complete shippingAddress is required')

        response = self.client.post(url, self.order_payload(paymentMethod='Gold'), format='json')
        self.assertEqual(response.data['message'], 'paymentMethod is not recognized')
        self.assertEqual(OrderModel.objects.count(), 0)

    @override_settings(ORDER_TOTAL_VERIFICATION=True)
    def test_total_verification(self):
        self.login_as(self.customer)
        response = self.client.post(reverse('order_list'), self.order_payload(totalAmount=1.0), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'totalAmount does not match order contents')

    def test_read_access(self):
        order = self.place_order()
        url = reverse('order_detail', args=[order['id']])

        self.assertEqual(len(self.client.get(reverse('order_list')).data['orders']), 1)
        self.assertEqual(self.client.get(url).data['order']['id'], order['id'])
        self.assertEqual(self.client.get(reverse('order_all')).status_code, status.HTTP_403_FORBIDDEN)

        other = AccountModel.objects.create_user('other@example.com', 'secret123')
        self.login_as(other)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get(reverse('order_list')).data['orders'], [])

        self.login_as(self.admin)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)
        self.assertEqual(len(self.client.get(reverse('order_all')).data['orders']), 1)

    def test_unknown_and_malformed_ids(self):
        self.login_as(self.customer)
        response = self.client.get(reverse('order_detail', args=['bad-id']))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get(reverse('order_detail', args=['5f0c8a4e-0000-4000-8000-000000000000']))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_cancel(self):
        order = self.place_order()
        url = reverse('order_cancel', args=[order['id']])

        response = self.client.put(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['orderStatus'], 'cancelled')

        response = self.client.put(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Only pending orders can be cancelled')

        response = self.client.post(reverse('order_pay', args=[order['id']]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Cancelled orders cannot be paid')
        stored = OrderModel.objects.get(pk=order['id'])
        self.assertEqual((stored.order_status, stored.payment_status), ('cancelled', 'unpaid'))

    def test_new_shopper_checkout_and_cancel(self):
        """
        Scenario: a shopper registers, logs in through the endpoint, places a
        two-line order of 45.50 and cancels it twice.
        """
        case = ProductModel.objects.create(
            name='Phone case', description='Silicone case', brand='Spigen', category='accessories',
            price=Decimal('20.50'), quantity=30, image_url='https://cdn.test/case.png',
        )
        response = self.client.post(reverse('account_register'), {
            'username': 'alice', 'email': 'alice@example.com', 'password': 'password123',
            'phoneNumber': '0788123456',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post(reverse('account_login'), {
            'email': 'alice@example.com', 'password': 'password123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(settings.JWT_COOKIE_NAME, self.client.cookies)

        response = self.client.post(reverse('order_list'), self.order_payload(
            products=[
                {'product': str(self.product.id), 'quantity': 1, 'price': 25.0},
                {'product': str(case.id), 'quantity': 1, 'price': 20.5},
            ],
            totalAmount=45.50,
            shippingMethod='Standard',
        ), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        order = response.data['order']
        self.assertEqual(order['orderStatus'], 'pending')
        self.assertEqual(order['paymentStatus'], 'unpaid')
        self.assertEqual(order['totalAmount'], 45.5)
        self.assertEqual(len(order['products']), 2)
        self.assertEqual(OrderModel.objects.get(pk=order['id']).account.email, 'alice@example.com')

        url = reverse('order_cancel', args=[order['id']])
        response = self.client.put(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['orderStatus'], 'cancelled')

        response = self.client.put(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Only pending orders can be cancelled')

    def test_pay_then_fulfil(self):
        order = self.place_order()

        self.login_as(self.admin)
        response = self.client.post(reverse('order_pay', args=[order['id']]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.login_as(self.customer)
        response = self.client.post(reverse('order_pay', args=[order['id']]))
        self.assertEqual(response.data['order']['orderStatus'], 'paid')
        self.assertEqual(response.data['order']['paymentStatus'], 'paid')

        response = self.client.post(reverse('order_pay', args=[order['id']]))
        self.assertEqual(response.data['message'], 'Order already paid')

        status_url = reverse('order_status', args=[order['id']])
        self.assertEqual(
            self.client.patch(status_url, {'orderStatus': 'delivered'}, format='json').status_code,
            status.HTTP_403_FORBIDDEN
        )

        self.login_as(self.admin)
        response = self.client.patch(status_url, {'orderStatus': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.patch(status_url, {'orderStatus': 'delivered'}, format='json')
        self.assertEqual(response.data['order']['orderStatus'], 'delivered')


# ====================================================================
# 5. BACK-OFFICE
# ====================================================================

class BackOfficeTests(StoreAPITestCase):

    def test_stats(self):
        self.login_as(self.customer)
        self.client.post(reverse('order_list'), self.order_payload(), format='json')

        self.login_as(self.admin)
        response = self.client.get(reverse('admin_stats'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalOrders'], 1)
        self.assertEqual(response.data['totalRevenue'], 0.0)
        self.assertEqual(response.data['productsSold'], 2)
        self.assertEqual(response.data['accountCount'], 2)
        self.assertEqual(response.data['productCount'], 1)
        self.assertEqual(len(response.data['recentOrders']), 1)
        self.assertEqual(response.data['topProducts'][0]['unitsSold'], 2)

    def test_stock_report_and_adjustment(self):
        self.login_as(self.admin)

        response = self.client.patch(reverse('product_stock', args=[self.product.id]), {'quantity': 3}, format='json')
        self.assertEqual(response.data['product']['quantity'], 3)

        response = self.client.get(reverse('admin_stock'))
        self.assertEqual(response.data['lowStockCount'], 1)
        self.assertEqual(response.data['outOfStockCount'], 0)
        self.assertEqual(response.data['products'][0]['status'], 'low-stock')

    def test_back_office_requires_admin(self):
        self.login_as(self.customer)
        self.assertEqual(self.client.get(reverse('admin_stats')).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get(reverse('admin_stock')).status_code, status.HTTP_403_FORBIDDEN)
