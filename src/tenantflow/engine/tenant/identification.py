"""
Tenant identification from request metadata.

The engine treats tenant ids as opaque keys; these helpers are what the HTTP
layer uses to derive one from a request's host and headers.
"""

from collections.abc import Mapping

LOCAL_HOSTS = ("localhost", "127.0.0.1")


def _strip_port(host: str) -> str:
    return host.split(":", 1)[0].strip().lower()


def _is_local(host: str) -> bool:
    return any(host == local or host.endswith(f".{local}") for local in LOCAL_HOSTS)


def extract_subdomain(host: str | None) -> str | None:
    """
    Return the tenant subdomain of a host, or None when there is none.

    ``acme.localhost:3000`` -> ``acme``; ``acme.example.com`` -> ``acme``;
    ``example.com``, ``localhost`` and ``www.*`` hosts have no tenant label.
    """
    if not host:
        return None
    clean = _strip_port(host)
    parts = clean.split(".")

    if _is_local(clean):
        if len(parts) >= 2 and parts[0] != "www" and clean != "127.0.0.1":
            return parts[0]
        return None

    if len(parts) >= 3 and parts[0] != "www":
        return parts[0]
    return None


def resolve_tenant_id(
    host: str | None,
    headers: Mapping[str, str] | None = None,
    header_name: str = "X-Tenant-ID",
) -> str | None:
    """
    Derive a tenant id from a request.

    Order: subdomain of the host, then the explicit tenant header, then the
    full custom domain for non-local hosts.
    """
    subdomain = extract_subdomain(host)
    if subdomain:
        return subdomain

    if headers:
        wanted = header_name.lower()
        for key, value in headers.items():
            if key.lower() == wanted and value:
                return value.strip()

    if host:
        clean = _strip_port(host)
        if clean and not _is_local(clean):
            return clean

    return None
