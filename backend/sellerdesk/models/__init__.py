from .tenancy import Seller
from .customers import Customer
from .catalog import Product, Category, Tag, ProductCategoryMapping, ProductTagMapping
from .sales import Sale
from .documents import Refund, Dispute
from .security import SecurityEvent

__all__ = [
    'Seller',
    'Customer',
    'Product', 'Category', 'Tag', 'ProductCategoryMapping', 'ProductTagMapping',
    'Sale',
    'Refund', 'Dispute',
    'SecurityEvent',
]
