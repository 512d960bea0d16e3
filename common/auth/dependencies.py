"""
FastAPI authentication dependencies.

Provides factory functions to create auth dependencies that can be
injected into route handlers. Works with any AuthProvider implementation.

Example:
    from common.auth import JWTAuth, create_admin_dependency

    auth = JWTAuth(secret="your-secret")
    require_admin = create_admin_dependency(lambda: auth)

    @router.post("/groups/{group_id}/approve")
    async def approve(group_id: str, claims: dict = Depends(require_admin)):
        ...
"""

from typing import Any, Callable, Dict, Optional
from fastapi import Header

from common.auth.base import AuthProvider
from common.utils.exceptions import ForbiddenException, UnauthorizedException


def create_auth_dependency(
    get_auth_provider: Callable[[], AuthProvider],
    header_name: str = "Authorization",
    scheme: str = "Bearer",
):
    """
    Factory to create FastAPI auth dependencies.

    Args:
        get_auth_provider: Callable that returns the AuthProvider instance
        header_name: Header to extract token from (default: Authorization)
        scheme: Auth scheme prefix (default: Bearer)

    Returns:
        A FastAPI dependency function that returns the verified token claims
    """

    async def get_current_claims(
        authorization: Optional[str] = Header(None, alias=header_name),
    ) -> Dict[str, Any]:
        """
        Extract and verify claims from the authorization header.

        Raises:
            UnauthorizedException: If token is missing, invalid, or expired
        """
        if not authorization:
            raise UnauthorizedException(
                message="Missing authorization header",
                code="UNAUTHORIZED",
            )

        prefix = f"{scheme} "
        if not authorization.startswith(prefix):
            raise UnauthorizedException(
                message=f"Invalid authorization scheme. Expected: {scheme}",
                code="INVALID_AUTH_SCHEME",
            )

        token = authorization[len(prefix) :]

        if not token:
            raise UnauthorizedException(message="Token is empty", code="EMPTY_TOKEN")

        auth = get_auth_provider()
        try:
            payload = await auth.verify_token(token)
        except ValueError as e:
            raise UnauthorizedException(message=str(e), code="INVALID_TOKEN")

        if not (payload.get("sub") or payload.get("uid")):
            raise UnauthorizedException(
                message="Token missing user ID",
                code="INVALID_TOKEN",
            )

        return payload

    return get_current_claims


def create_admin_dependency(
    get_auth_provider: Callable[[], AuthProvider],
    header_name: str = "Authorization",
    scheme: str = "Bearer",
):
    """
    Factory to create a dependency that only admits admin tokens.

    The token must verify and carry a truthy ``admin`` claim.

    Returns:
        A FastAPI dependency that returns the verified admin claims
    """
    get_current_claims = create_auth_dependency(get_auth_provider, header_name, scheme)

    async def require_admin(
        authorization: Optional[str] = Header(None, alias=header_name),
    ) -> Dict[str, Any]:
        claims = await get_current_claims(authorization)
        if not claims.get("admin"):
            raise ForbiddenException(
                message="Admin privileges required",
                code="NOT_ADMIN",
            )
        return claims

    return require_admin
