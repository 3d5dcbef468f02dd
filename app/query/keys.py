# app/query/keys.py
# Cache keys are tuples of URL path segments; matching is by tuple prefix.

NOTIFICATIONS_KEY = ("/api/client/notifications",)
UNREAD_COUNT_KEY = ("/api/client/notifications/unread-count",)
ORDERS_KEY = ("/api/client/orders",)
PRICE_OFFERS_KEY = ("/api/client/price-offers",)
PRODUCTS_KEY = ("/api/products",)


def order_history_key(order_id: int) -> tuple:
    return ("/api/orders", order_id, "history")


def order_modifications_key(order_id: int) -> tuple:
    return ("/api/orders", order_id, "modifications")
