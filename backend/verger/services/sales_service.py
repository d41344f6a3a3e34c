"""
Sales Service - kiosk and market sales

A recorded sale is three writes in one unit of work: the sale row, an exit
StockMovement labelled "Sale <channel>", and the stock decrement.
"""
from __future__ import annotations

import logging

from ..models import Sale
from ..validation import ValidationError, parse_channel, parse_id, parse_quantity

logger = logging.getLogger(__name__)


class SaleRecordingService:
    def __init__(self, store, stock):
        self.store = store
        self.stock = stock

    def record_sale(self, *, product_id, quantity, channel, client_id=None) -> Sale:
        """
        Raises:
            ValidationError / InvalidChannel: malformed request
            NotFoundError: unknown product
            InsufficientStockError: quantity above live stock
        """
        product_id = parse_id(product_id, "product_id")
        quantity = parse_quantity(quantity)
        channel = parse_channel(channel)
        if client_id in (None, ""):
            client_id = None
        else:
            client_id = parse_id(client_id, "client_id")

        with self.store.atomic() as session:
            if client_id is not None:
                self._require_active_client(client_id)

            sale = Sale(
                product_id=product_id,
                quantity=quantity,
                channel=channel,
                client_id=client_id,
            )

            self.stock._apply_locked(
                product_id=product_id,
                direction="exit",
                quantity=quantity,
                source=f"Sale {channel}",
            )
            session.add(sale)
            session.flush()

        logger.info(
            "Sale recorded: sale_id=%s product_id=%s quantity=%s channel=%s",
            sale.id, product_id, quantity, channel,
        )
        return sale

    def _require_active_client(self, client_id: int) -> None:
        client = self.store.get_client_for_update(client_id)
        if client is None or not client.active:
            raise ValidationError("Client not found or inactive")
