"""
Authentication middleware.

Decodes the bearer token (if any) and attaches the caller's claims to the
request state. The middleware never rejects anonymous requests: routes that
need a user, or a particular role, declare it through the dependencies in
``api.dependencies`` and ``core.middleware.authorization``.

A token that is present but expired, malformed or badly signed is rejected
here with a 401.
"""

import logging
from typing import Callable, Optional

import jwt
from fastapi import Request, status
from fastapi.responses import JSONResponse

from core.security import AuthenticatedUser, verify_jwt_token

logger = logging.getLogger(__name__)

# Paths that never look at credentials
PUBLIC_PREFIXES = ("/health", "/ready", "/docs", "/redoc", "/openapi")


class AuthenticationError(Exception):
    """Base exception for authentication errors."""


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is invalid."""


class AuthenticationMiddleware:
    """
    Pure ASGI middleware that validates JWT access tokens.

    Tokens are read from ``Authorization: Bearer <token>`` or, for older
    clients, the ``x-auth-token`` header.
    """

    def __init__(
        self,
        app: Callable,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
    ):
        """
        Args:
            app: ASGI application
            jwt_secret: Secret key for JWT verification
            jwt_algorithm: JWT signing algorithm
        """
        self.app = app
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)

        if self._is_public_endpoint(request.url.path):
            await self.app(scope, receive, send)
            return

        token = self._extract_token(request)
        if not token:
            await self.app(scope, receive, send)
            return

        try:
            try:
                payload = verify_jwt_token(token, self.jwt_secret, self.jwt_algorithm)
            except jwt.ExpiredSignatureError:
                raise TokenExpiredError("Token has expired")
            except jwt.InvalidTokenError as e:
                raise TokenInvalidError(f"Invalid token: {str(e)}")

            user = AuthenticatedUser.from_payload(payload)
        except TokenExpiredError:
            await self._send_error_response(
                scope,
                receive,
                send,
                status_code=status.HTTP_401_UNAUTHORIZED,
                code="TOKEN_EXPIRED",
                message="Authentication token has expired. Please login again.",
            )
            return
        except (TokenInvalidError, KeyError, ValueError) as e:
            logger.warning(f"Invalid token: {str(e)}")
            await self._send_error_response(
                scope,
                receive,
                send,
                status_code=status.HTTP_401_UNAUTHORIZED,
                code="TOKEN_INVALID",
                message="Invalid authentication token.",
            )
            return

        # Starlette's request.state is backed by scope["state"]
        scope.setdefault("state", {})["user"] = user
        await self.app(scope, receive, send)

    def _is_public_endpoint(self, path: str) -> bool:
        """True for health checks and API docs."""
        return any(path.startswith(prefix) for prefix in PUBLIC_PREFIXES)

    def _extract_token(self, request: Request) -> Optional[str]:
        """
        Extract JWT token from the request headers.

        Args:
            request: FastAPI request

        Returns:
            JWT token or None
        """
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            return auth_header[7:].strip() or None

        return request.headers.get("x-auth-token") or None

    async def _send_error_response(
        self,
        scope: dict,
        receive: Callable,
        send: Callable,
        status_code: int,
        code: str,
        message: str,
    ) -> None:
        """Send the uniform error envelope for authentication failures."""
        response = JSONResponse(
            status_code=status_code,
            content={
                "error": {
                    "code": code,
                    "message": message,
                    "path": scope.get("path", "unknown"),
                    "method": scope.get("method", "unknown"),
                }
            },
        )
        await response(scope, receive, send)
