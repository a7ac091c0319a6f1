# gadgetstore/presentation/views_admin.py
"""
Back-office API: dashboard figures, stock management and order fulfilment.
"""
from django.utils import timezone
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from gadgetstore.core import dependency_injection as di
from .permissions import IsAdminRole
from .serializers import DashboardStatsSerializer, OrderSerializer, ProductSerializer, StockRowSerializer


class AdminAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]


class DashboardStatsAPIView(AdminAPIView):
    """Current calendar month against the previous one."""

    def get(self, request):
        stats = di.get_dashboard_stats_use_case().execute(now=timezone.localtime())
        return Response(DashboardStatsSerializer(stats).data)


class StockReportAPIView(AdminAPIView):

    def get(self, request):
        report = di.get_manage_products_use_case().stock_report()
        return Response({
            'products': StockRowSerializer(report['products'], many=True).data,
            'lowStockCount': report['low_stock_count'],
            'outOfStockCount': report['out_of_stock_count'],
        })


class ProductStockAPIView(AdminAPIView):
    """PATCH /api/products/<id>/stock {quantity}: sets the quantity on hand."""

    def patch(self, request, product_id):
        product = di.get_manage_products_use_case().adjust_stock(product_id, request.data.get('quantity'))
        return Response({'product': ProductSerializer(product).data})


class OrderStatusAPIView(AdminAPIView):
    """PATCH /api/orders/<id>/status {orderStatus}: paid -> delivered -> completed."""

    def patch(self, request, order_id):
        order = di.get_admin_order_status_use_case().set_status(order_id, request.data.get('orderStatus'))
        return Response({'message': 'Order status updated', 'order': OrderSerializer(order).data})
