"""
Mappers converting between:
1. Django ORM models
2. Domain entities (gadgetstore.core.entities)
"""
from typing import Any, Optional, Type
from decimal import Decimal
from django.db import models
from django.apps import apps

from gadgetstore.core.entities import (
    Account as AccountEntity,
    Product as ProductEntity,
    Cart as CartEntity,
    CartItem as CartItemEntity,
    Order as OrderEntity,
    OrderItem as OrderItemEntity,
    ShippingAddress as ShippingAddressEntity,
    SPEC_KEYS,
    DEFAULT_COUNTRY,
)


def get_model(app_label: str, model_name: str):
    """Returns a Django model lazily."""
    return apps.get_model(app_label, model_name)


class BaseMapper:

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        raise NotImplementedError

    @classmethod
    def new_model(cls) -> Any:
        return cls.model_class()()


# ====================================================================
# ACCOUNT MAPPER
# ====================================================================

class AccountMapper(BaseMapper):

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('infrastructure', 'Account')

    @staticmethod
    def to_entity(model: Any) -> Optional[AccountEntity]:
        if not model: return None
        return AccountEntity(
            id=str(model.id),
            email=model.email,
            username=model.username,
            role=model.role,
            phone_number=model.phone_number,
            auth_provider=model.auth_provider,
            date_joined=model.date_joined,
        )

    @classmethod
    def to_model(cls, entity: AccountEntity, model: Optional[Any] = None) -> Any:
        """Copies profile fields only; passwords are handled by the repository."""
        if not model:
            model = cls.new_model()
            model.id = entity.id
        model.email = entity.email
        model.username = entity.username
        model.role = entity.role
        model.phone_number = entity.phone_number
        model.auth_provider = entity.auth_provider
        return model


# ====================================================================
# CATALOG MAPPER
# ====================================================================

class ProductMapper(BaseMapper):

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('catalog', 'Product')

    @staticmethod
    def to_entity(model: Any) -> Optional[ProductEntity]:
        if not model: return None
        specs = model.specs or {}
        return ProductEntity(
            id=str(model.id),
            name=model.name,
            description=model.description,
            price=model.price,
            original_price=model.original_price,
            category=model.category,
            brand=model.brand,
            image=model.image_url,
            images=list(model.images or []),
            quantity=model.quantity,
            featured=model.featured,
            specs={key: specs.get(key, "") for key in SPEC_KEYS},
            rating=model.rating,
            review_count=model.review_count,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @classmethod
    def to_model(cls, entity: ProductEntity, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.new_model()
            model.id = entity.id
        model.name = entity.name
        model.description = entity.description
        model.price = entity.price
        model.original_price = entity.original_price
        model.category = entity.category
        model.brand = entity.brand
        model.image_url = entity.image
        model.images = list(entity.images)
        model.quantity = entity.quantity
        model.featured = entity.featured
        model.specs = dict(entity.specs)
        model.rating = entity.rating
        model.review_count = entity.review_count
        return model


# ====================================================================
# CART MAPPERS
# ====================================================================

class CartItemMapper(BaseMapper):

    @staticmethod
    def to_entity(model: Any) -> Optional[CartItemEntity]:
        if not model: return None
        return CartItemEntity(
            product_id=str(model.product_id),
            quantity=model.quantity,
            unit_price=model.product.price,
            product=ProductMapper.to_entity(model.product),
        )


class CartMapper(BaseMapper):

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('cart', 'Cart')

    @staticmethod
    def to_entity(model: Any) -> Optional[CartEntity]:
        if not model: return None
        items = model.items.select_related('product').all()
        return CartEntity(
            id=str(model.id),
            account_id=str(model.account_id),
            items=[CartItemMapper.to_entity(item) for item in items],
            updated_at=model.updated_at,
        )


# ====================================================================
# ORDER MAPPERS
# ====================================================================

class ShippingAddressMapper:
    """The address is stored as a JSON document on the order."""

    @staticmethod
    def to_entity(data: dict) -> ShippingAddressEntity:
        data = data or {}
        return ShippingAddressEntity(
            full_name=data.get('fullName', ''),
            phone=data.get('phone', ''),
            district=data.get('district', ''),
            city=data.get('city', ''),
            country=data.get('country') or DEFAULT_COUNTRY,
        )

    @staticmethod
    def to_document(entity: ShippingAddressEntity) -> dict:
        return {
            'fullName': entity.full_name,
            'phone': entity.phone,
            'country': entity.country or DEFAULT_COUNTRY,
            'district': entity.district,
            'city': entity.city,
        }


class OrderItemMapper(BaseMapper):

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('orders', 'OrderItem')

    @staticmethod
    def to_entity(model: Any) -> Optional[OrderItemEntity]:
        if not model: return None
        return OrderItemEntity(
            product_id=model.product_ref,
            product_name=model.product_name,
            quantity=model.quantity,
            price=Decimal(model.price),
        )

    @classmethod
    def to_model(cls, entity: OrderItemEntity, order_model: Any) -> Any:
        return cls.model_class()(
            order=order_model,
            product_id=entity.product_id,
            product_ref=entity.product_id,
            product_name=entity.product_name,
            quantity=entity.quantity,
            price=entity.price,
        )


class OrderMapper(BaseMapper):

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('orders', 'Order')

    @staticmethod
    def to_entity(model: Any) -> Optional[OrderEntity]:
        if not model: return None
        return OrderEntity(
            id=str(model.id),
            account_id=str(model.account_id),
            items=[OrderItemMapper.to_entity(item) for item in model.items.all()],
            total_amount=Decimal(model.total_amount),
            subtotal=Decimal(model.subtotal),
            shipping_address=ShippingAddressMapper.to_entity(model.shipping_address),
            shipping_method=model.shipping_method,
            payment_method=model.payment_method,
            order_status=model.order_status,
            payment_status=model.payment_status,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @classmethod
    def to_model(cls, entity: OrderEntity) -> Any:
        """Only used at creation; orders are never rewritten wholesale."""
        return cls.model_class()(
            id=entity.id,
            account_id=entity.account_id,
            total_amount=entity.total_amount,
            subtotal=entity.subtotal,
            shipping_address=ShippingAddressMapper.to_document(entity.shipping_address),
            shipping_method=entity.shipping_method,
            payment_method=entity.payment_method,
            order_status=entity.order_status,
            payment_status=entity.payment_status,
        )
