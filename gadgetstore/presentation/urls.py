"""
REST API routes of the store: accounts, catalog, carts, orders and the
back-office. Paths carry no trailing slash.
"""
from django.urls import path
from . import views, views_auth, views_admin


urlpatterns = [
    # ====================================================================
    # 1. ACCOUNTS
    # ====================================================================
    path('api/account/register', views_auth.RegisterAPIView.as_view(), name='account_register'),
    path('api/account/login', views_auth.LoginAPIView.as_view(), name='account_login'),
    path('api/account/logout', views_auth.LogoutAPIView.as_view(), name='account_logout'),
    path('api/account/update', views_auth.UpdateProfileAPIView.as_view(), name='account_update'),
    path('api/dashboard', views_auth.DashboardAPIView.as_view(), name='dashboard'),

    # ====================================================================
    # 2. CATALOG
    # ====================================================================
    path('api/products', views.ProductListAPIView.as_view(), name='product_list'),
    path('api/products/add', views.ProductCreateAPIView.as_view(), name='product_add'),
    path('api/products/<str:product_id>/stock', views_admin.ProductStockAPIView.as_view(), name='product_stock'),
    path('api/products/<str:product_id>', views.ProductDetailAPIView.as_view(), name='product_detail'),

    # ====================================================================
    # 3. CART
    # ====================================================================
    path('api/cart', views.CartAPIView.as_view(), name='cart'),
    path('api/cart/merge', views.CartMergeAPIView.as_view(), name='cart_merge'),
    path('api/cart/<str:product_id>', views.CartItemAPIView.as_view(), name='cart_item'),

    # ====================================================================
    # 4. ORDERS ('all' is declared before the id route)
    # ====================================================================
    path('api/orders', views.OrderListCreateAPIView.as_view(), name='order_list'),
    path('api/orders/all', views.OrderAllAPIView.as_view(), name='order_all'),
    path('api/orders/<str:order_id>/cancel', views.OrderCancelAPIView.as_view(), name='order_cancel'),
    path('api/orders/<str:order_id>/pay', views.OrderPayAPIView.as_view(), name='order_pay'),
    path('api/orders/<str:order_id>/status', views_admin.OrderStatusAPIView.as_view(), name='order_status'),
    path('api/orders/<str:order_id>', views.OrderDetailAPIView.as_view(), name='order_detail'),

    # ====================================================================
    # 5. BACK-OFFICE
    # ====================================================================
    path('api/admin/stats', views_admin.DashboardStatsAPIView.as_view(), name='admin_stats'),
    path('api/admin/stock', views_admin.StockReportAPIView.as_view(), name='admin_stock'),
]
