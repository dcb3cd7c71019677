from typing import Final

# Storage slot names
ORDERS_KEY: Final[str] = "ck_orders_v1"

# Field lookup order, highest priority first
ORDER_ID_FIELDS: Final[tuple[str, ...]] = ("order_id", "orderId", "id")
PLACED_AT_FIELDS: Final[tuple[str, ...]] = ("orderPlacedAt", "placedAt", "order_placed_at", "placed_at")

STORAGE_QUOTA_WARNING: Final[str] = "Storage limit reached! Try clearing old data."
STORAGE_WRITE_WARNING: Final[str] = "Could not save orders; changes are kept for this session only."

PROMPT_TEMPLATE: Final[str] = (
    """
    You are the operations analyst of a cloud kitchen that sells through a food delivery platform.
    Greet the operator by name: {user_name}.
    The platform keeps a commission of {commission_pct}% of gross revenue.
    Analyze the {count} orders below and answer ONLY with a JSON object in the following format:

    """
)
INSIGHT_JSON_FORMAT: Final[str] = (
    """
{
    "greeting": str,
    "alert": str or null (only for something urgent, e.g. a spike in cancellations),
    "profitabilityAnalysis": {
        "grossRevenue": number,
        "zomatoCommission": number,
        "estimatedNet": number,
        "analysis": str
    },
    "demandForecasting": str (peak hours, best sellers, menu mix suggestions),
    "customerInsights": str (repeat customers, ratings, complaints),
    "recommendations": [
        str,
        str,
        str
    ]
}
    """
)
ORDERS_HEADER: Final[str] = "\nOrders (JSON):\n"
