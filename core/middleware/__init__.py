"""
Core middleware package.

- Error handling with sensitive data sanitization
- Structured logging with PII masking
- JWT authentication
- Role-based authorization
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    sanitize_error_message,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    setup_logging,
)

from core.middleware.authentication import (
    AuthenticationMiddleware,
    AuthenticationError,
)

from core.middleware.authorization import (
    Permission,
    Role,
    ROLE_PERMISSIONS,
    get_user_permissions,
    has_permission,
    require_permission,
    require_roles,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "setup_error_handlers",
    "sanitize_error_message",
    # Logging
    "StructuredLoggingMiddleware",
    "setup_logging",
    # Authentication
    "AuthenticationMiddleware",
    "AuthenticationError",
    # Authorization
    "Permission",
    "Role",
    "ROLE_PERMISSIONS",
    "get_user_permissions",
    "has_permission",
    "require_permission",
    "require_roles",
]
