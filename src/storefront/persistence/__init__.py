"""Remote backend abstraction — pluggable hosted data service."""

from storefront import config

_backend_instance = None


def get_backend():
    """Return the configured remote backend adapter (singleton).

    Uses FakeBackend by default. Configure via the STOREFRONT_BACKEND
    environment variable: ``fake``, ``rest`` or ``offline``.
    """
    global _backend_instance
    if _backend_instance is None:
        adapter = config.BACKEND_ADAPTER
        if adapter == "fake":
            from storefront.persistence.fake_adapter import FakeBackend

            _backend_instance = FakeBackend()
        elif adapter == "rest":
            from storefront.persistence.rest_adapter import RestBackend

            _backend_instance = RestBackend(config.BACKEND_URL, config.BACKEND_KEY)
        elif adapter == "offline":
            from storefront.persistence.offline_adapter import OfflineBackend

            _backend_instance = OfflineBackend()
        else:
            raise ValueError(f"Unknown backend adapter: {adapter}")
    return _backend_instance


def set_backend(backend):
    """Install a specific backend instance (tests, app wiring)."""
    global _backend_instance
    _backend_instance = backend


def reset_backend():
    """Reset the backend singleton (useful for testing)."""
    global _backend_instance
    _backend_instance = None
