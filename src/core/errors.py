"""Centralized client-facing error messages.

Clients switch on these exact strings, so changing one is a breaking change.
"""

AUTHENTICATION_ERRORS = {
    "MISSING_REGISTER_FIELDS": "Username, password, email, and site are required.",
    "DUPLICATE_USER": "Username or email already exists for this site.",
    "REGISTER_FAILED": "Error registering user.",
    "MISSING_LOGIN_FIELDS": "Username, password, and site are required.",
    "INVALID_CREDENTIALS": "Invalid credentials.",
    "LOGIN_FAILED": "Error logging in.",
    "MISSING_TOKEN": "Access token is missing.",
    "INVALID_TOKEN": "Invalid or expired token.",
}

PRINTIFY_ERRORS = {
    "MISSING_STORE_ID": "Store ID is required.",
    "MISSING_SHIPPING_FIELDS": "Missing required fields.",
    "FAILED_FETCH_PRODUCTS": "Failed to fetch products from Printify.",
    "FAILED_SHIPPING_OPTIONS": "Failed to retrieve shipping options.",
    "MISSING_ORDER_FIELDS": "Missing storeId, order details, or stripe_payment_id.",
    "FAILED_PROCESS_ORDER": "Failed to process order.",
    "ORDER_UNLINKED": "Order was submitted for fulfillment but could not be linked.",
    "MISSING_ORDER_STATUS_FIELDS": "Missing orderId or email.",
    "ORDER_NOT_FOUND": "Order not found.",
    "FAILED_ORDER_STATUS": "Failed to retrieve order status.",
    "FAILED_SEND_TO_PRODUCTION": "Failed to send order to production.",
}

PAYMENT_ERRORS = {
    "MISSING_FIELDS": "storeId, amount, and currency are required.",
    "INVALID_AMOUNT": "Amount must be a positive number.",
    "PAYMENT_FAILED": "Payment processing failed.",
}
