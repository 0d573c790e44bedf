"""Models package - exports all SQLAlchemy models."""
from pos.models.product import Product
from pos.models.customer import Customer, CustomerStatus
from pos.models.sale import Sale, SYSTEM_ACTOR
from pos.models.sale_line import SaleLine
from pos.models.payment import Payment, PaymentMethod, normalize_payment_method
from pos.models.user import User, UserRole

__all__ = [
    'Product',
    'Customer', 'CustomerStatus',
    'Sale', 'SYSTEM_ACTOR', 'SaleLine',
    'Payment', 'PaymentMethod', 'normalize_payment_method',
    'User', 'UserRole',
]
