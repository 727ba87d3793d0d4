"""Storefront bounded context — wholesale/retail ordering core.

Owns the shopping cart, the stock ledger, order records with their status
lifecycle, and per-user purchase metrics. Orders and stock changes follow a
dual persistence path: a remote hosted backend for shoppers with a server
identity, and the local store for guests or whenever the remote is down.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
