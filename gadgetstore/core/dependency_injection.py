# gadgetstore/core/dependency_injection.py
"""
Dependency injection.
Builds the use cases with the concrete repositories and gateways of the
infrastructure layer.
"""
from django.conf import settings

from gadgetstore.infrastructure.repositories import (
    AccountRepositoryDjango,
    CartRepositoryDjango,
    OrderRepositoryDjango,
    ProductRepositoryDjango,
)
from gadgetstore.infrastructure.gateways import TokenIssuer, build_image_host
from .use_cases import (
    AdminOrderStatusUseCase,
    AuthenticateUseCase,
    CreateOrderUseCase,
    DashboardStatsUseCase,
    FindOrCreateOAuthAccountUseCase,
    ListOrdersUseCase,
    ListProductsUseCase,
    ManageCartUseCase,
    ManageProductsUseCase,
    OrderDetailUseCase,
    OrderTransitionsUseCase,
    ProductDetailUseCase,
    RegisterAccountUseCase,
    UpdateProfileUseCase,
)

# Concrete repositories
product_repo = ProductRepositoryDjango()
cart_repo = CartRepositoryDjango()
order_repo = OrderRepositoryDjango()
account_repo = AccountRepositoryDjango()
token_issuer = TokenIssuer()

_image_host = None


def get_image_host():
    global _image_host
    if _image_host is None:
        _image_host = build_image_host()
    return _image_host


# ====================================================================
# Catalog
# ====================================================================

def get_list_products_use_case() -> ListProductsUseCase:
    return ListProductsUseCase(product_repo)

def get_product_detail_use_case() -> ProductDetailUseCase:
    return ProductDetailUseCase(product_repo)

def get_manage_products_use_case() -> ManageProductsUseCase:
    return ManageProductsUseCase(product_repo, get_image_host())


# ====================================================================
# Cart and orders
# ====================================================================

def get_manage_cart_use_case() -> ManageCartUseCase:
    return ManageCartUseCase(cart_repo, product_repo)

def get_create_order_use_case() -> CreateOrderUseCase:
    return CreateOrderUseCase(
        order_repo=order_repo,
        product_repo=product_repo,
        verify_total=settings.ORDER_TOTAL_VERIFICATION
    )

def get_list_orders_use_case() -> ListOrdersUseCase:
    return ListOrdersUseCase(order_repo)

def get_order_detail_use_case() -> OrderDetailUseCase:
    return OrderDetailUseCase(order_repo)

def get_order_transitions_use_case() -> OrderTransitionsUseCase:
    return OrderTransitionsUseCase(order_repo)

def get_admin_order_status_use_case() -> AdminOrderStatusUseCase:
    return AdminOrderStatusUseCase(order_repo)


# ====================================================================
# Accounts and back-office
# ====================================================================

def get_register_account_use_case() -> RegisterAccountUseCase:
    return RegisterAccountUseCase(account_repo)

def get_authenticate_use_case() -> AuthenticateUseCase:
    return AuthenticateUseCase(account_repo)

def get_update_profile_use_case() -> UpdateProfileUseCase:
    return UpdateProfileUseCase(account_repo)

def get_oauth_account_use_case() -> FindOrCreateOAuthAccountUseCase:
    return FindOrCreateOAuthAccountUseCase(account_repo)

def get_dashboard_stats_use_case() -> DashboardStatsUseCase:
    return DashboardStatsUseCase(order_repo, product_repo, account_repo)
