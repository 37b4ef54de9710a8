"""Order confirmation emails, composed per store and sent via Resend."""

import html
import logging
from typing import Any
from urllib.parse import urlencode

import resend

from src.core.stores import StoreRegistry, get_store_registry
from src.schemas.email import ComposeFailure, OrderEmail, OrderEmailItem, OrderEmailSummary
from src.schemas.printify import CustomerAddress

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "NZD": "NZ$",
    "EUR": "€",
    "GBP": "£",
}

# Printify shipping method IDs
SHIPPING_METHOD_LABELS = {
    1: "Standard",
    2: "Priority",
    3: "Express",
    4: "Economy",
}


def format_money(amount: int, currency: str) -> str:
    """Format an amount in minor units, e.g. ``format_money(1999, "USD") == "$19.99"``."""
    code = (currency or "USD").upper()
    value = f"{amount / 100:,.2f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"-{symbol}{value[1:]}" if amount < 0 else f"{symbol}{value}"
    return f"{value} {code}"


def shipping_method_label(shipping_method: int | str) -> str:
    if isinstance(shipping_method, int) and not isinstance(shipping_method, bool):
        return SHIPPING_METHOD_LABELS.get(shipping_method, str(shipping_method))
    return str(shipping_method)


def build_tracking_url(frontend_url: str, order_id: str, email: str) -> str:
    query = urlencode({"orderId": order_id, "email": email})
    return f"{frontend_url.rstrip('/')}/order-status?{query}"


def _escape(value: Any) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def _address_lines(address: CustomerAddress) -> list[str]:
    city_line = " ".join(part for part in (address.city, address.region or "", address.zip) if part)
    lines = [
        f"{address.first_name} {address.last_name}".strip(),
        address.address1,
        address.address2 or "",
        city_line,
        address.country,
    ]
    return [line for line in lines if line]


def _item_label(item: OrderEmailItem) -> str:
    return f"{item.title} ({item.variant_label})" if item.variant_label else item.title


def _render_text(store_name: str, order_id: str, summary: OrderEmailSummary, tracking_url: str) -> str:
    lines = [
        f"Thank you for your order from {store_name}!",
        "",
        f"Your order ID is {order_id}.",
        "",
        "Items:",
    ]
    for item in summary.items:
        lines.append(
            f"  {item.quantity} x {_item_label(item)} @ {format_money(item.price, summary.currency)}"
            f" = {format_money(item.line_total, summary.currency)}"
        )
    lines += [
        "",
        f"Shipping method: {shipping_method_label(summary.shipping_method)}",
        f"Total: {format_money(summary.total_price, summary.currency)}",
        "",
        "Shipping to:",
        *(f"  {line}" for line in _address_lines(summary.address)),
        "",
        f"Track your order: {tracking_url}",
    ]
    return "\n".join(lines) + "\n"


def _render_html(store_name: str, order_id: str, summary: OrderEmailSummary, tracking_url: str) -> str:
    rows = "".join(
        f"""
            <tr>
                <td style="padding: 8px; border-bottom: 1px solid #e5e7eb;">{_escape(_item_label(item))}</td>
                <td style="padding: 8px; border-bottom: 1px solid #e5e7eb; text-align: center;">{item.quantity}</td>
                <td style="padding: 8px; border-bottom: 1px solid #e5e7eb; text-align: right;">{_escape(format_money(item.price, summary.currency))}</td>
                <td style="padding: 8px; border-bottom: 1px solid #e5e7eb; text-align: right;">{_escape(format_money(item.line_total, summary.currency))}</td>
            </tr>"""
        for item in summary.items
    )
    address_block = "<br>".join(_escape(line) for line in _address_lines(summary.address))
    safe_url = _escape(tracking_url)

    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Order Confirmation</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h2>Thank you for your order!</h2>
    <p>Your {_escape(store_name)} order ID is <strong>{_escape(order_id)}</strong>.</p>

    <table style="width: 100%; border-collapse: collapse; margin: 20px 0;">
        <thead>
            <tr>
                <th style="padding: 8px; text-align: left;">Item</th>
                <th style="padding: 8px; text-align: center;">Qty</th>
                <th style="padding: 8px; text-align: right;">Price</th>
                <th style="padding: 8px; text-align: right;">Total</th>
            </tr>
        </thead>
        <tbody>{rows}
        </tbody>
    </table>

    <p>Shipping method: {_escape(shipping_method_label(summary.shipping_method))}</p>
    <p><strong>Order total: {_escape(format_money(summary.total_price, summary.currency))}</strong></p>

    <h3>Shipping to</h3>
    <p>{address_block}</p>

    <p><a href="{safe_url}">Click here</a> to view and track your order.</p>
    <p style="font-size: 12px; color: #666; margin-top: 16px;">
        If the link doesn't work, copy and paste this URL into your browser:<br>
        <span style="word-break: break-all;">{safe_url}</span>
    </p>
</body>
</html>
"""


def compose_order_confirmation(
    store_id: str,
    to_email: str,
    order_id: str,
    summary: OrderEmailSummary,
    stores: StoreRegistry,
) -> OrderEmail | ComposeFailure:
    """Render the order confirmation email for a store.

    Missing configuration is returned as a ComposeFailure rather than raised,
    since a missing email must never fail the order itself.

    Args:
        store_id: Store the order belongs to.
        to_email: Customer email.
        order_id: Customer-facing order number.
        summary: Order projection to render.
        stores: Store registry holding per-store email settings.

    Returns:
        OrderEmail | ComposeFailure: The rendered email, or the reason there is none.
    """
    config = stores.get_email_config(store_id)
    if config is None:
        return ComposeFailure(error=f"No email configuration for store {store_id}.")
    if not config.has_sender_identity:
        return ComposeFailure(error=f"Email configuration for store {store_id} has no sender identity.")

    tracking_url = build_tracking_url(config.frontend_url, order_id, to_email)
    return OrderEmail(
        sender=f"{config.store_name} Orders <{config.sender}>",
        to=to_email,
        subject=f"{config.store_name} Order Confirmation - {order_id}",
        text=_render_text(config.store_name, order_id, summary, tracking_url),
        html=_render_html(config.store_name, order_id, summary, tracking_url),
        tracking_url=tracking_url,
    )


class EmailService:
    """Service for sending order emails via Resend with per-store keys."""

    def __init__(self, stores: StoreRegistry | None = None) -> None:
        self.stores = stores or get_store_registry()

    async def send_order_confirmation(
        self,
        store_id: str,
        to_email: str,
        order_id: str,
        summary: OrderEmailSummary,
    ) -> dict[str, Any]:
        """Compose and send an order confirmation email.

        Never raises; the outcome is reported in the returned dict.

        Args:
            store_id: Store the order belongs to.
            to_email: Customer email.
            order_id: Customer-facing order number.
            summary: Order projection to render.

        Returns:
            dict: ``{"success": True, "email_id": ...}`` or ``{"success": False, "error": ...}``.
        """
        email = compose_order_confirmation(store_id, to_email, order_id, summary, self.stores)
        if isinstance(email, ComposeFailure):
            logger.error("Order email for %s not composed: %s", order_id, email.error)
            return {"success": False, "error": email.error}

        config = self.stores.get_email_config(store_id)
        # resend.api_key is process-wide. The swap is only safe while the send
        # below runs synchronously; moving it to a thread needs a per-call key.
        previous_api_key = getattr(resend, "api_key", None)
        resend.api_key = config.resend_api_key
        try:
            response = resend.Emails.send({
                "from": email.sender,
                "to": [email.to],
                "subject": email.subject,
                "html": email.html,
                "text": email.text,
            })
        except Exception as e:
            logger.error("Failed to send order email for %s: %s", order_id, str(e))
            return {"success": False, "error": str(e)}
        finally:
            resend.api_key = previous_api_key

        email_id = response.get("id") if isinstance(response, dict) else None
        if not email_id:
            logger.error("Resend returned no email ID for order %s: %s", order_id, response)
            return {"success": False, "error": "Email provider returned no ID."}

        logger.info("Order confirmation for %s sent, id: %s", order_id, email_id)
        return {"success": True, "email_id": email_id}
