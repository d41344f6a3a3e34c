from .inventory import Product, StockMovement
from .sales import Sale
from .clients import Client

__all__ = [
    'Product', 'StockMovement',
    'Sale',
    'Client',
]
