from __future__ import annotations

from dataclasses import dataclass

from .client_service import ClientRegistryService
from .products_service import ProductCatalogService
from .reporting_service import ReportingService
from .sales_service import SaleRecordingService
from .stock_service import StockMutationService


@dataclass(frozen=True)
class ServiceRegistry:
    """Services wired to one LedgerStore; kept in app.extensions["verger"]."""

    store: object
    stock: StockMutationService
    sales: SaleRecordingService
    clients: ClientRegistryService
    products: ProductCatalogService
    reporting: ReportingService

    @classmethod
    def build(cls, store) -> "ServiceRegistry":
        stock = StockMutationService(store)
        return cls(
            store=store,
            stock=stock,
            sales=SaleRecordingService(store, stock),
            clients=ClientRegistryService(store),
            products=ProductCatalogService(store, stock),
            reporting=ReportingService(store),
        )
