from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import SAFE_METHODS, AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from gadgetstore.core import dependency_injection as di
from .authentication import current_account
from .permissions import IsAdminRole
from .serializers import (
    CartSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    ProductSerializer,
)

# ====================================================================
# VIEWS: orchestrate the request, the use case and the response.
# ====================================================================

# Request field -> use case field for product writes
PRODUCT_FIELDS = {
    'name': 'name',
    'description': 'description',
    'price': 'price',
    'originalPrice': 'original_price',
    'category': 'category',
    'brand': 'brand',
    'quantity': 'quantity',
    'featured': 'featured',
    'specs': 'specs',
    'rating': 'rating',
    'reviewCount': 'review_count',
}


def _product_data(request) -> dict:
    return {
        target: request.data.get(source)
        for source, target in PRODUCT_FIELDS.items()
        if source in request.data
    }


def _string_list(request, key):
    """Reads a repeated form field or a JSON list; None when the key is absent."""
    if key not in request.data:
        return None
    if hasattr(request.data, 'getlist'):
        return request.data.getlist(key)
    value = request.data.get(key)
    if isinstance(value, str):
        return [value]
    return list(value or [])


class PublicReadMixin:
    """Reads are anonymous; writes authenticate and require the admin role."""

    def perform_authentication(self, request):
        if request.method not in SAFE_METHODS:
            super().perform_authentication(request)

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            self.permission_classes = [AllowAny]
        else:
            self.permission_classes = [IsAuthenticated, IsAdminRole]
        return [permission() for permission in self.permission_classes]


# ====================================================================
# CATALOG
# ====================================================================

class ProductListAPIView(PublicReadMixin, APIView):
    """
    GET /api/products: catalog with optional ?category=, ?featured=, ?search=.
    """

    def get(self, request):
        featured = request.query_params.get('featured')
        products = di.get_list_products_use_case().execute(
            category=request.query_params.get('category'),
            featured=None if featured is None else featured.lower() == 'true',
            search=request.query_params.get('search'),
        )
        return Response({
            'success': True,
            'products': ProductSerializer(products, many=True).data,
        })


class ProductCreateAPIView(APIView):
    """POST /api/products/add: multipart product with 'image' and up to three 'additionalImages'."""
    permission_classes = [IsAuthenticated, IsAdminRole]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def post(self, request):
        product = di.get_manage_products_use_case().create(
            _product_data(request),
            main_image=request.FILES.get('image'),
            additional_images=request.FILES.getlist('additionalImages'),
        )
        return Response(
            {'message': 'Product created successfully', 'product': ProductSerializer(product).data},
            status=status.HTTP_201_CREATED
        )


class ProductDetailAPIView(PublicReadMixin, APIView):
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get(self, request, product_id):
        product = di.get_product_detail_use_case().execute(product_id)
        return Response({'success': True, 'product': ProductSerializer(product).data})

    def put(self, request, product_id):
        """Partial update. New uploads replace or extend the stored image URLs."""
        product = di.get_manage_products_use_case().update(
            product_id,
            _product_data(request),
            main_image=request.FILES.get('image'),
            additional_images=request.FILES.getlist('additionalImages'),
            existing_image=request.data.get('existingImage'),
            existing_additional_images=_string_list(request, 'existingAdditionalImages'),
        )
        return Response({'product': ProductSerializer(product).data})

    patch = put

    def delete(self, request, product_id):
        di.get_manage_products_use_case().delete(product_id)
        return Response({'success': True, 'message': 'Product deleted'})


# ====================================================================
# CART
# ====================================================================

class CartAPIView(APIView):
    """
    The caller's server cart. POST applies a quantity delta to one line.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        cart = di.get_manage_cart_use_case().get(current_account(request).id)
        return Response(CartSerializer(cart).data)

    def post(self, request):
        cart = di.get_manage_cart_use_case().add(
            current_account(request).id,
            request.data.get('productId'),
            request.data.get('quantity', 1),
        )
        return Response(CartSerializer(cart).data)

    def delete(self, request):
        cart = di.get_manage_cart_use_case().clear(current_account(request).id)
        return Response(CartSerializer(cart).data)


class CartItemAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, product_id):
        """Sets the absolute quantity of a line; zero or less removes it."""
        cart = di.get_manage_cart_use_case().set_quantity(
            current_account(request).id, product_id, request.data.get('quantity')
        )
        return Response(CartSerializer(cart).data)

    def delete(self, request, product_id):
        cart = di.get_manage_cart_use_case().remove(current_account(request).id, product_id)
        return Response(CartSerializer(cart).data)


class CartMergeAPIView(APIView):
    """
    POST /api/cart/merge {items: [{productId, quantity}]}: raises server lines
    to at least the submitted quantities.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        lines = {}
        for item in request.data.get('items') or []:
            if isinstance(item, dict) and item.get('productId'):
                lines[str(item['productId'])] = item.get('quantity')

        result = di.get_manage_cart_use_case().merge(current_account(request).id, lines)
        payload = CartSerializer(result.cart).data
        payload['applied'] = result.applied
        payload['skipped'] = result.skipped
        return Response(payload)


# ====================================================================
# ORDERS
# ====================================================================

class OrderListCreateAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        """Orders of the caller, newest first."""
        orders = di.get_list_orders_use_case().mine(current_account(request))
        return Response({'orders': OrderSerializer(orders, many=True).data})

    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = di.get_create_order_use_case().execute(
            account_id=current_account(request).id,
            **serializer.to_order_kwargs()
        )
        return Response(
            {'message': 'Order created successfully', 'order': OrderSerializer(order).data},
            status=status.HTTP_201_CREATED
        )


class OrderAllAPIView(APIView):
    """Every order in the store. Administrators only."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        orders = di.get_list_orders_use_case().all_orders(current_account(request))
        return Response({'orders': OrderSerializer(orders, many=True).data})


class OrderDetailAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, order_id):
        order = di.get_order_detail_use_case().execute(order_id, current_account(request))
        return Response({'order': OrderSerializer(order).data})


class OrderCancelAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request, order_id):
        order = di.get_order_transitions_use_case().cancel(order_id, current_account(request))
        return Response({'message': 'Order cancelled successfully', 'order': OrderSerializer(order).data})

    post = put


class OrderPayAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, order_id):
        order = di.get_order_transitions_use_case().pay(order_id, current_account(request))
        return Response({'message': 'Order marked as paid', 'order': OrderSerializer(order).data})
