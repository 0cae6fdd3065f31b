"""响应组装.

负责把模板渲染成 HTML 片段,并包装为 HTML 响应或 JSON 信封:
成功为 ``{"html": ...}``,失败为 ``{"messages": [...]}``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from flask import Response, current_app, g, jsonify, render_template
from flask_sqlalchemy.record_queries import get_recorded_queries

from crudcore.auth.context import AdminContext, AuthProvider, FlaskLoginAuthProvider, current_admin_context
from crudcore.constants import HttpStatus, RequestAttribute, TemplateAttribute
from crudcore.handlers.lookup_conditions import resolve_queue
from crudcore.i18n.loader import load_language
from crudcore.i18n.translator import LanguageContext, Translator
from crudcore.utils.structlog_config import get_logger

if TYPE_CHECKING:
    from crudcore.handlers.base import EntityHandler

logger = get_logger("handlers")


class TemplateRenderer(Protocol):
    """模板渲染协作者,缺少可选属性时不应抛出异常."""

    def render(self, template_name: str, attributes: Mapping[str, Any]) -> str: ...


class FlaskTemplateRenderer:
    """使用应用 Jinja 环境渲染模板."""

    def render(self, template_name: str, attributes: Mapping[str, Any]) -> str:
        return render_template(template_name, **attributes)


def current_language_context() -> LanguageContext:
    """返回当前请求使用的语言快照,未加载时回退到进程级当前语言."""
    context = getattr(g, RequestAttribute.LANGUAGE_CONTEXT, None)
    return context if isinstance(context, LanguageContext) else Translator.active()


def _collect_query_log() -> list[dict[str, Any]]:
    if not current_app.config.get("SQLALCHEMY_RECORD_QUERIES"):
        return []
    return [
        {
            "statement": info.statement,
            "parameters": info.parameters,
            "duration": info.duration,
        }
        for info in get_recorded_queries()
    ]


class ResponseComposer:
    """模板渲染与响应包装.

    Attributes:
        renderer: 模板渲染协作者.
        auth_provider: 认证协作者,用于读取用户与用户设置.

    """

    def __init__(
        self,
        renderer: TemplateRenderer | None = None,
        auth_provider: AuthProvider | None = None,
    ) -> None:
        self.renderer: TemplateRenderer = renderer or FlaskTemplateRenderer()
        self.auth_provider: AuthProvider = auth_provider or FlaskLoginAuthProvider()

    # ------------------------------------------------------------------ #
    # 语言
    # ------------------------------------------------------------------ #
    def ensure_language(self, admin_context: AdminContext | None = None) -> LanguageContext:
        """首次渲染或用户语言偏好与当前语言不同时重新加载语言字典.

        Returns:
            本次请求使用的语言快照,同时写入 ``g``.

        """
        admin_context = admin_context or current_admin_context()
        preferred = None
        if admin_context.is_authenticated:
            preferred = admin_context.preferred_language(self.auth_provider.settings_table_prefix())

        target = None
        if not Translator.is_loaded():
            target = preferred or current_app.config.get("DEFAULT_LANGUAGE")
        elif preferred is not None and preferred != Translator.active_code():
            target = preferred

        # 已安装的字典(包括未标注语言名称的)在偏好未变化时保持不变
        if target is not None:
            dictionary = load_language(str(target), current_app.config.get("LANGUAGE_DIR", "languages"))
            Translator.set_language(dictionary, code=target)
            logger.info("语言字典已加载", module="i18n", language=target, preferred=preferred is not None)

        context = Translator.active()
        setattr(g, RequestAttribute.LANGUAGE_CONTEXT, context)
        return context

    # ------------------------------------------------------------------ #
    # 渲染
    # ------------------------------------------------------------------ #
    def render_html(self, template_name: str, attributes: Mapping[str, Any] | None = None) -> str:
        """渲染模板为 HTML 字符串.

        已认证请求会附加管理员名称、用户路径、用户、用户设置、语言字典、CSRF 令牌与查询日志.
        """
        admin_context = current_admin_context()
        language = self.ensure_language(admin_context)
        context = dict(attributes or {})

        if admin_context.is_authenticated:
            context[TemplateAttribute.ADMIN_NAME] = admin_context.admin_name
            context[TemplateAttribute.USER_PATH] = admin_context.user_path
            context[TemplateAttribute.USER] = admin_context.user
            context[TemplateAttribute.USER_SETTINGS] = admin_context.user_settings
            context[TemplateAttribute.LANGUAGE] = language.dictionary
            context[TemplateAttribute.CSRF_TOKEN] = getattr(g, RequestAttribute.CSRF_TOKEN, None)
            context[TemplateAttribute.QUERY_LOG] = _collect_query_log()

        return self.renderer.render(template_name, context)

    def json_response(
        self,
        template_name: str | None,
        status: int,
        attributes: Mapping[str, Any] | None = None,
        errors: Sequence[str] | None = None,
    ) -> Response:
        """生成 JSON 响应.

        Args:
            template_name: 成功时渲染的模板名称.
            status: HTTP 状态码;只有 200 会渲染模板.
            attributes: 模板所需数据,失败场景可以为空.
            errors: 失败时返回给用户的错误消息.

        Returns:
            ``{"html": ...}`` 或 ``{"messages": [...]}`` 的 JSON 响应.

        """
        if status == HttpStatus.OK:
            if template_name is None:
                raise ValueError("status=200 时必须提供模板名称")
            payload: dict[str, Any] = {"html": self.render_html(template_name, attributes)}
        else:
            payload = {"messages": list(errors or [])}

        response = jsonify(payload)
        response.status_code = int(status)
        return response

    def html_response(
        self,
        handler: EntityHandler,
        template_name: str,
        post_data: Mapping[str, Any] | None = None,
    ) -> Response:
        """渲染处理器模板数据为 HTML 响应,并回填非空的搜索关键字."""
        post_data = post_data or {}
        attributes = dict(handler.generate_template_data(post_data))

        searchqueue = handler.handler_config.searchqueue
        queue = resolve_queue(handler.handler_config, post_data)
        if searchqueue is not None and queue is not None:
            attributes[searchqueue] = queue

        return self._html(self.render_html(template_name, attributes))

    def html_response_with_attributes(
        self,
        template_name: str,
        attributes: Mapping[str, Any] | None = None,
    ) -> Response:
        """直接渲染给定数据,始终携带管理员名称."""
        context = dict(attributes or {})
        context[TemplateAttribute.ADMIN_NAME] = current_admin_context().admin_name
        return self._html(self.render_html(template_name, context))

    @staticmethod
    def _html(body: str, status: int = HttpStatus.OK) -> Response:
        return Response(body, status=status, mimetype="text/html")
