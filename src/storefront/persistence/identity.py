"""Identity-shape predicate that selects the persistence backend.

Shoppers signed in with the hosted backend carry a UUID issued by it; guests
and offline sessions carry any other opaque string. The same test applies to
product and order ids: only UUID-shaped ids exist on the remote side.
"""

import re

_SERVER_IDENTITY = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_server_identity(value) -> bool:
    """Return True when ``value`` is a server-issued (UUID shaped) identity."""
    if not value:
        return False
    return bool(_SERVER_IDENTITY.match(str(value)))
