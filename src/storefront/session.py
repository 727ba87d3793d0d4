"""Shopper identity supplied by the session provider."""

from dataclasses import dataclass

from storefront.persistence.identity import is_server_identity


@dataclass(frozen=True)
class Shopper:
    id: str
    email: str = ""
    name: str = ""

    @property
    def has_server_identity(self) -> bool:
        return is_server_identity(self.id)
