"""
Tenantflow engine - tenant configuration resolution for multi-tenant platforms.

Decides what configuration a tenant has at any moment: templates and
overrides are merged into a full configuration tree, held in a registry,
served through a TTL cache and turned into derived artifacts on demand.
"""

__version__ = "1.0.0"


def get_version() -> str:
    """Get engine version."""
    return __version__
