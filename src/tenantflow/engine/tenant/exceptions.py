"""
Tenant configuration exceptions.

Not-found conditions on read and write paths are reported through ``None`` /
``False`` return values, never through these exceptions. They cover the few
cases where a caller asked for something the engine refuses to do.
"""

from typing import Any


class TenantConfigError(Exception):
    """
    Base tenant configuration error with context.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        context: Additional context data about the error
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or "TENANT_CONFIG_ERROR"
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
        }


class TenantAlreadyExistsError(TenantConfigError):
    """Provisioning would overwrite an existing tenant."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(
            f"Tenant '{tenant_id}' already exists; pass overwrite=True to re-provision",
            "TENANT_ALREADY_EXISTS",
            context={"tenant_id": tenant_id},
        )


class TemplateNotFoundError(TenantConfigError):
    """Strict template lookup failed."""

    def __init__(self, template_name: str) -> None:
        super().__init__(
            f"Template '{template_name}' not found",
            "TEMPLATE_NOT_FOUND",
            context={"template": template_name},
        )


class MergeError(TenantConfigError):
    """A merge layer does not fit the configuration schema."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, "MERGE_ERROR", context={"path": path} if path else None)
