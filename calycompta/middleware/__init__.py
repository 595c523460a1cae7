"""
Authentication middleware.

Runs on every request (except PUBLIC_ROUTES):
  1. Decode the bearer JWT → sub, club_id, role_id
  2. Set request.state.user, actor_id, club_id, role_id

Module permissions are checked per route by
calycompta.registry.require_module_permission.
"""

from fastapi import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from calycompta.auth.helpers import decode_access_token
from calycompta.utils import error_response


# Routes that skip token verification
PUBLIC_ROUTES = [
    "/health",
    "/bootstrap",
    "/openapi.json",
    "/api/docs",
    "/redoc",
]


class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path
        if any(path.endswith(route) for route in PUBLIC_ROUTES):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return error_response("Missing Authorization header", code=401)

        if not auth_header.startswith("Bearer "):
            return error_response("Invalid token format. Expected 'Bearer <token>'", code=401)

        token = auth_header.split(" ", 1)[1].strip()

        try:
            payload = decode_access_token(token)
        except HTTPException as e:
            return error_response(e.detail, code=e.status_code)

        if not payload.get("club_id"):
            return error_response("Token carries no club_id", code=401)

        request.state.user = payload
        request.state.actor_id = payload.get("sub")
        request.state.club_id = payload["club_id"]
        request.state.role_id = payload.get("role_id")

        return await call_next(request)
