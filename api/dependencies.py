"""FastAPI dependencies for dependency injection."""

from typing import Callable, Optional
from fastapi import Depends, Query, Request, Response
from fastapi.routing import APIRoute

from api.schemas.common import PaginationParams
from api.services.admins import authorize_admin
from core.exceptions import Unauthenticated
from core.middleware.authentication import get_principal
from core.security import Principal
from database.models.users import Admin


async def get_optional_principal(request: Request) -> Optional[Principal]:
    """
    The caller's principal if a valid session was presented, else None.
    Useful for endpoints that work both authenticated and unauthenticated.
    """
    return get_principal(request)


async def require_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    """Require a signed-in caller."""
    if principal is None:
        raise Unauthenticated()
    return principal


class AdminGateRoute(APIRoute):
    """
    Route class that runs the admin gate before FastAPI reads the body.

    Dependencies are solved only after the JSON body is parsed, so a
    ``Depends`` gate alone would let a malformed body answer 400 to a
    caller who should get 401/403.
    """

    def get_route_handler(self) -> Callable:
        handler = super().get_route_handler()

        async def gated_handler(request: Request) -> Response:
            request.state.admin = await authorize_admin(get_principal(request))
            return await handler(request)

        return gated_handler


async def require_admin(request: Request) -> Admin:
    """The caller's Admin row; runs the gate unless AdminGateRoute already did."""
    admin = getattr(request.state, "admin", None)
    if admin is None:
        admin = await authorize_admin(get_principal(request))
    return admin


def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
) -> PaginationParams:
    return PaginationParams(page=page, limit=limit)
