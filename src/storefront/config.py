"""Runtime settings for the storefront core.

Protean infrastructure (databases, event store, processing mode) is configured
in ``domain.toml`` next to the domain module. The values below are business
and integration settings, read once from the environment with defaults.
"""

import os


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# ---------------------------------------------------------------------------
# Cart and pricing
# ---------------------------------------------------------------------------
DELIVERY_FEE = _env_float("STOREFRONT_DELIVERY_FEE", 15.0)
DEFAULT_MIN_ORDER_QUANTITY = _env_int("STOREFRONT_DEFAULT_MIN_ORDER_QUANTITY", 12)
DEFAULT_WHOLESALE_MODE = _env_bool("STOREFRONT_DEFAULT_WHOLESALE_MODE", True)

# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------
MONTHLY_GOAL = _env_float("STOREFRONT_MONTHLY_GOAL", 5000.0)
RECENT_ACTIVITY_LIMIT = _env_int("STOREFRONT_RECENT_ACTIVITY_LIMIT", 10)
TOP_PRODUCTS_LIMIT = _env_int("STOREFRONT_TOP_PRODUCTS_LIMIT", 3)

# ---------------------------------------------------------------------------
# Remote backend
# ---------------------------------------------------------------------------
BACKEND_ADAPTER = os.environ.get("STOREFRONT_BACKEND", "fake")
BACKEND_URL = os.environ.get("STOREFRONT_BACKEND_URL", "")
BACKEND_KEY = os.environ.get("STOREFRONT_BACKEND_KEY", "")
BACKEND_TIMEOUT = _env_float("STOREFRONT_BACKEND_TIMEOUT", 10.0)
STOCK_CAS_ATTEMPTS = _env_int("STOREFRONT_STOCK_CAS_ATTEMPTS", 3)

# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
NOTIFICATION_ADAPTER = os.environ.get("STOREFRONT_NOTIFICATIONS", "fake")
EMAILJS_URL = os.environ.get("EMAILJS_URL", "https://api.emailjs.com/api/v1.0/email/send")
EMAILJS_SERVICE_ID = os.environ.get("EMAILJS_SERVICE_ID", "")
EMAILJS_TEMPLATE_ID = os.environ.get("EMAILJS_TEMPLATE_ID", "")
EMAILJS_PUBLIC_KEY = os.environ.get("EMAILJS_PUBLIC_KEY", "")
SUPPORT_EMAIL = os.environ.get("STOREFRONT_SUPPORT_EMAIL", "support@storefront.local")
