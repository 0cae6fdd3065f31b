"""请求身份上下文.

上游认证中间件在 ``flask.g`` 上挂载 ``admin_name``/``user_path``;
``admin_name`` 存在是请求已认证的唯一信号.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from flask import current_app, g, has_app_context
from flask_login import current_user
from flask_wtf.csrf import generate_csrf

from crudcore.constants import RequestAttribute

LANGUAGE_SETTING_SUFFIX = "language"


@runtime_checkable
class AuthProvider(Protocol):
    """认证协作者: 提供当前用户与用户设置."""

    def get_user(self) -> Any | None: ...

    def get_user_settings(self) -> Mapping[str, Any]: ...

    def settings_table_prefix(self) -> str: ...


@runtime_checkable
class CsrfGuard(Protocol):
    """CSRF 协作者."""

    def generate_token(self) -> str: ...


class FlaskLoginAuthProvider:
    """基于 flask-login ``current_user`` 的默认认证协作者.

    用户设置取自用户对象的 ``settings`` 属性(映射或返回映射的方法).
    """

    def get_user(self) -> Any | None:
        if not getattr(current_user, "is_authenticated", False):
            return None
        return current_user._get_current_object()

    def get_user_settings(self) -> Mapping[str, Any]:
        user = self.get_user()
        settings = getattr(user, "settings", None) if user is not None else None
        if callable(settings):
            settings = settings()
        return settings if isinstance(settings, Mapping) else {}

    def settings_table_prefix(self) -> str:
        return str(current_app.config.get("SETTINGS_TABLE_PREFIX", ""))


class FlaskWtfCsrfGuard:
    """基于 flask-wtf 的 CSRF 令牌生成器."""

    def generate_token(self) -> str:
        return generate_csrf()


def resolve_csrf_guard() -> CsrfGuard | None:
    """当前应用注册了 CSRFProtect 时返回默认 CSRF 协作者."""
    if not has_app_context() or "csrf" not in current_app.extensions:
        return None
    return FlaskWtfCsrfGuard()


@dataclass(frozen=True, slots=True)
class AdminContext:
    """单个请求的身份信息.

    Attributes:
        admin_name: 管理员显示名称,None 表示未认证.
        user_path: 用户路径.
        user: 已认证的用户对象.
        user_settings: 用户设置.

    """

    admin_name: str | None = None
    user_path: str | None = None
    user: Any | None = None
    user_settings: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_authenticated(self) -> bool:
        return self.admin_name is not None

    def preferred_language(self, prefix: str) -> str | None:
        """返回用户保存的语言偏好,键为 ``<prefix>language``."""
        value = self.user_settings.get(f"{prefix}{LANGUAGE_SETTING_SUFFIX}")
        if isinstance(value, str) and value:
            return value
        return None


def capture_admin_context(auth_provider: AuthProvider | None = None) -> AdminContext:
    """读取上游挂载的身份属性,写入 ``g`` 并返回.

    未认证请求不会查询用户与用户设置.
    """
    admin_name = getattr(g, RequestAttribute.ADMIN_NAME, None)
    user_path = getattr(g, RequestAttribute.USER_PATH, None)

    user = None
    user_settings: Mapping[str, Any] = {}
    if admin_name is not None and auth_provider is not None:
        user = auth_provider.get_user()
        user_settings = auth_provider.get_user_settings()

    context = AdminContext(
        admin_name=admin_name,
        user_path=user_path,
        user=user,
        user_settings=MappingProxyType(dict(user_settings)),
    )
    setattr(g, RequestAttribute.ADMIN_CONTEXT, context)
    return context


def current_admin_context() -> AdminContext:
    """返回当前请求已捕获的身份上下文,尚未捕获时返回匿名上下文."""
    context = getattr(g, RequestAttribute.ADMIN_CONTEXT, None)
    return context if isinstance(context, AdminContext) else AdminContext()
