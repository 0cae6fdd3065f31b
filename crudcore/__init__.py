"""crudcore - Flask 应用初始化.

配置驱动的 CRUD 请求处理核心: 实体处理器通过 ``register_entity_handler`` 挂载到分发视图.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from flask import Blueprint, Flask, Response, jsonify
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect

from crudcore.errors import AppError, map_exception_to_status, public_message
from crudcore.forms.middleware import register_form_middleware
from crudcore.handlers.base import EntityHandler
from crudcore.handlers.dispatcher import RequestDispatcher
from crudcore.handlers.response_composer import current_language_context
from crudcore.infra.logging import register_request_logging
from crudcore.settings import Settings
from crudcore.utils.structlog_config import configure_structlog, get_logger

# 初始化扩展
db = SQLAlchemy()
login_manager = LoginManager()
csrf = CSRFProtect()

UserLoader = Callable[[str], Any]


def _anonymous_user_loader(user_id: str) -> None:
    del user_id


def create_app(
    *,
    settings: Settings | None = None,
    user_loader: UserLoader | None = None,
    template_folder: str | None = "templates",
) -> Flask:
    """创建Flask应用实例.

    Args:
        settings: 可选的配置对象,用于测试或多环境启动.
        user_loader: flask-login 用户加载器,缺省时所有会话视为匿名.
        template_folder: Jinja 模板目录.

    Returns:
        Flask: Flask应用实例

    """
    resolved_settings = settings or Settings.load()
    app = Flask(__name__, template_folder=template_folder)
    app.config.from_mapping(resolved_settings.to_flask_config())

    initialize_extensions(app, user_loader=user_loader)

    # 配置统一日志系统
    configure_structlog(app)
    register_request_logging(app)

    # 表单预处理需在请求日志之后注册
    register_form_middleware(app)

    configure_error_handlers(app)
    configure_template_globals(app)
    return app


def initialize_extensions(app: Flask, *, user_loader: UserLoader | None = None) -> None:
    """初始化数据库、登录与 CSRF 等 Flask 扩展."""
    db.init_app(app)
    csrf.init_app(app)
    login_manager.init_app(app)
    login_manager.user_loader(user_loader or _anonymous_user_loader)


def configure_error_handlers(app: Flask) -> None:
    """注册全局错误处理器,所有逃逸的异常统一输出 ``{"messages": [...]}`` 信封."""

    @app.errorhandler(Exception)
    def handle_global_exception(error: Exception) -> Response:
        status_code = map_exception_to_status(error)
        logger = get_logger("app")
        log_fields: dict[str, Any] = {"module": "system", "error_type": type(error).__name__}
        if isinstance(error, AppError):
            log_fields.update(error.extra, category=error.category.value, severity=error.severity.value)
        if status_code >= 500:
            logger.exception("未处理的请求异常", **log_fields)
        else:
            logger.warning("请求异常", status_code=status_code, **log_fields)
        response = jsonify({"messages": [public_message(error)]})
        response.status_code = status_code
        return response


def configure_template_globals(app: Flask) -> None:
    """注册模板中使用的翻译函数与过滤器."""

    def template_translate(key: str | None, default: str | None = None) -> str | None:
        translated = current_language_context().translate(key)
        return translated if translated is not None else default

    app.add_template_global(template_translate, "translate")
    app.add_template_filter(template_translate, "t")


def register_entity_handler(
    target: Flask | Blueprint,
    rule: str,
    endpoint: str,
    handler: EntityHandler,
) -> None:
    """把实体处理器挂载到 URL 规则上.

    Args:
        target: Flask 应用或蓝图.
        rule: URL 规则,例如 ``/users``.
        endpoint: 端点名称.
        handler: 实现 EntityHandler 协议的处理器实例.

    """
    target.add_url_rule(rule, view_func=RequestDispatcher.as_view(endpoint, handler=handler))


__all__ = [
    "create_app",
    "csrf",
    "db",
    "login_manager",
    "register_entity_handler",
]
