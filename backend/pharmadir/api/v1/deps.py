# pharmadir/api/v1/deps.py
from fastapi import Depends, Header, Request
from pharmadir.core.context import AppContext
from pharmadir.core.errors import ForbiddenError
from pharmadir.schemas.identity import Role, UserIdentity

def get_context(request: Request) -> AppContext:
    """
    FastAPI dependency returning the service container built at startup.
    """
    return request.app.state.context

async def get_current_identity(
    authorization: str | None = Header(default=None),
    ctx: AppContext = Depends(get_context),
) -> UserIdentity:
    """
    FastAPI dependency resolving the caller's identity from the
    "Authorization: Bearer <token>" header.

    Every authorized route goes through this dependency, which delegates to
    the identity resolver; handlers never see the raw token.

    Raises:
        UnauthorizedError (401): No Authorization header (AUTH_REQUIRED)
        InvalidInputError (400): Malformed header, invalid or expired token
        NotFoundError (404): Token refers to an account that no longer exists

    Usage:
        @router.get("/protected")
        async def protected_route(identity: UserIdentity = Depends(get_current_identity)):
            return {"uid": identity.uid}
    """
    return await ctx.resolver.resolve(authorization)

async def require_admin(identity: UserIdentity = Depends(get_current_identity)) -> UserIdentity:
    """
    FastAPI dependency ensuring the caller's token carries the ADMIN role.

    Raises:
        ForbiddenError (403): If the caller is not an admin (FORBIDDEN_ADMIN_ONLY)
    """
    if identity.role != Role.ADMIN:
        raise ForbiddenError("FORBIDDEN_ADMIN_ONLY")
    return identity
