"""Persistence for Printify orders."""

import logging

from supabase import Client

from src.api.middleware.error_handler import PersistenceError
from src.core.supabase import get_supabase_client
from src.models.order import Order, OrderCreate, OrderLookup

logger = logging.getLogger(__name__)

ORDERS_TABLE = "printify_orders"


class OrderStore:
    """Supabase-backed store for order rows.

    Every method takes an optional ``client`` so a caller can run several
    statements against a scoped client; the shared singleton is used
    otherwise.
    """

    def __init__(self, client: Client | None = None) -> None:
        self.client = client or get_supabase_client()

    def _db(self, client: Client | None) -> Client:
        return client or self.client

    async def save_order(self, order: OrderCreate, client: Client | None = None) -> Order:
        """Insert a new order row.

        Args:
            order: Order data to persist.
            client: Optional scoped Supabase client.

        Returns:
            Order: The inserted row.

        Raises:
            PersistenceError: If the insert fails.
        """
        try:
            response = self._db(client).table(ORDERS_TABLE).insert(dict(order)).execute()
        except Exception as e:
            logger.error("Error saving order %s: %s", order["order_number"], str(e))
            raise PersistenceError("Failed to save order.") from e

        if not response.data:
            raise PersistenceError("Failed to save order.")
        return response.data[0]

    async def update_printify_order_id(
        self,
        order_number: str,
        printify_order_id: str,
        client: Client | None = None,
    ) -> str:
        """Record the Printify order ID for an order.

        Setting the same ID twice is harmless, so callers may retry.

        Args:
            order_number: Customer-facing order number.
            printify_order_id: ID assigned by Printify.
            client: Optional scoped Supabase client.

        Returns:
            str: The updated row's ``id``.

        Raises:
            PersistenceError: If the update fails or matches no row.
        """
        try:
            response = (
                self._db(client)
                .table(ORDERS_TABLE)
                .update({"printify_order_id": printify_order_id})
                .eq("order_number", order_number)
                .execute()
            )
        except Exception as e:
            logger.error("Error updating Printify order ID for %s: %s", order_number, str(e))
            raise PersistenceError("Failed to update Printify order ID.") from e

        if not response.data:
            raise PersistenceError("Failed to update Printify order ID.")
        return str(response.data[0]["id"])

    async def get_order_by_customer(
        self,
        order_number: str,
        email: str,
        client: Client | None = None,
    ) -> OrderLookup | None:
        """Look up an order by order number and customer email.

        Both must match; knowing one without the other yields None.

        Args:
            order_number: Customer-facing order number.
            email: Email used for the order.
            client: Optional scoped Supabase client.

        Returns:
            OrderLookup | None: The order's lookup fields, or None if not found.

        Raises:
            PersistenceError: If the query fails.
        """
        try:
            response = (
                self._db(client)
                .table(ORDERS_TABLE)
                .select("store_id, printify_order_id, total_price, shipping_cost, currency")
                .eq("order_number", order_number)
                .eq("email", email)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            logger.error("Error retrieving order %s: %s", order_number, str(e))
            raise PersistenceError("Failed to retrieve order.") from e

        return response.data if response and response.data else None
