"""
Settings dependency shared by the route handlers and client factories.
"""

from badgecard.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """Return the process-wide settings; Discord credentials are validated on first use.

    Tests swap configuration through ``app.dependency_overrides[get_app_settings]``
    or by clearing ``get_settings``'s cache after changing the environment.
    """
    return get_settings()


__all__ = ["get_app_settings"]
