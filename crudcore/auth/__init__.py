"""请求身份上下文与 CSRF 协作者."""

from crudcore.auth.context import (
    AdminContext,
    AuthProvider,
    CsrfGuard,
    FlaskLoginAuthProvider,
    FlaskWtfCsrfGuard,
    capture_admin_context,
    current_admin_context,
    resolve_csrf_guard,
)

__all__ = [
    "AdminContext",
    "AuthProvider",
    "CsrfGuard",
    "FlaskLoginAuthProvider",
    "FlaskWtfCsrfGuard",
    "capture_admin_context",
    "current_admin_context",
    "resolve_csrf_guard",
]
