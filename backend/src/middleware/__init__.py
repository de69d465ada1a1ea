"""
Middleware components for the events tracker backend.

This module provides:
- TenantContext: Dataclass describing the caller (user and team set)
- get_tenant_context: FastAPI dependency building it from the session cookie
- require_auth: FastAPI dependency for requiring authentication
- RequestLoggingMiddleware: Request ID propagation and access logging
"""

from backend.src.middleware.tenant import TenantContext, get_tenant_context
from backend.src.middleware.auth import require_auth
from backend.src.middleware.request_logging import RequestLoggingMiddleware

__all__ = [
    "TenantContext",
    "get_tenant_context",
    "require_auth",
    "RequestLoggingMiddleware",
]
