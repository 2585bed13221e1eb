"""
Rutas Seguras Backend — Authorization Dependencies
==================================================

What:  FastAPI dependencies that turn the Authorization header into a caller
       identity and gate endpoints by role.
Why:   Every protected endpoint goes through the same checks, declared next
       to the route instead of repeated inside handlers.
How:   HTTPBearer(auto_error=False) extracts the token; `verify_token` checks
       signature and expiry; `require_roles(...)` compares the role claim.
Who:   Used by route handlers via `Depends(...)`.

Settings:
    `get_settings` hands out the Settings the running app was built with
    (`app.state.settings`). Token checks and page sizes read from it, so an
    app created with its own Settings signs, verifies and paginates with them.

Decision table:
    header missing / not "Bearer"        → AuthError      (401)
    token invalid / expired / tampered   → AuthError      (401)
    authenticated but role not allowed   → ForbiddenError (403)

Role checks run as dependencies, before the handler and before any storage
call, so a rejected mutation never touches the row.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from rutas_seguras.config import Settings
from rutas_seguras.exceptions import AuthError, ForbiddenError
from rutas_seguras.security import TokenClaims, verify_token
from rutas_seguras.services.pagination import PageRequest

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False, description="JWT issued by /api/auth/login")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_page_request(
    page: int = Query(default=1, description="Page number; clamped into [1, MAX_PAGE]"),
    config: Settings = Depends(get_settings),
) -> PageRequest:
    return PageRequest(page=page, page_size=config.page_size, max_page=config.max_page)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    config: Settings = Depends(get_settings),
) -> TokenClaims:
    """
    Resolve the caller from the bearer token.

    Also stores the claims on `request.state.user` so middleware and handlers
    can read the caller without re-verifying.

    Raises:
        AuthError: Missing, malformed, expired or tampered token (→ 401)
    """
    if credentials is None:
        raise AuthError(message="Authentication required")

    claims = verify_token(credentials.credentials, secret=config.jwt_secret)
    if claims is None:
        raise AuthError(message="Invalid or expired token")

    request.state.user = claims
    return claims


def require_roles(*roles: str) -> Callable:
    """
    Build a dependency that admits only callers whose role is in `roles`.

    Example:
        @router.get("/routes/assigned")
        async def assigned(user: TokenClaims = Depends(require_roles("conductor", "admin"))):
            ...
    """
    allowed = frozenset(roles)

    async def check_role(user: TokenClaims = Depends(get_current_user)) -> TokenClaims:
        if user.role not in allowed:
            logger.warning(
                "User %s (role=%s) denied; requires one of %s", user.id, user.role, sorted(allowed)
            )
            raise ForbiddenError(required_roles=tuple(sorted(allowed)))
        return user

    return check_role


require_admin = require_roles("admin")
require_driver = require_roles("conductor", "admin")
