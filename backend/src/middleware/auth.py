"""
Authentication dependency for API routes.

Provides:
- require_auth: FastAPI dependency that rejects anonymous callers

A thin wrapper around the tenant context for clearer API semantics.
Session validation itself lives in tenant.py.
"""

from fastapi import Depends, HTTPException, status

from backend.src.middleware.tenant import TenantContext, get_tenant_context


async def require_auth(
    ctx: TenantContext = Depends(get_tenant_context)
) -> TenantContext:
    """
    FastAPI dependency that requires authentication.

    Args:
        ctx: TenantContext from get_tenant_context dependency

    Returns:
        TenantContext with the caller's user and team set

    Raises:
        HTTPException 401: If the caller is not authenticated

    Example:
        @router.get("/events")
        async def list_events(
            ctx: TenantContext = Depends(require_auth)
        ):
            return service.get_events_by_teams(ctx.team_ids)
    """
    if not ctx.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Authentication required"},
        )
    return ctx


__all__ = [
    "require_auth",
    "TenantContext",
]
