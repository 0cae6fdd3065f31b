"""请求日志追踪.

每个请求在 ``g`` 上持有一个 ``RequestTrace``: 绑定 request_id/user_id 上下文变量,
并在响应返回前输出一条 ``http_request_completed`` 事件,
附带分发动作(``config``)与管理员名称,便于按实体动作聚合.
"""

from __future__ import annotations

import re
import time
from contextlib import suppress
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from flask import Flask, g, request
from flask_login import current_user

from crudcore.auth.context import current_admin_context
from crudcore.constants import DISPATCH_FIELD, RequestAttribute
from crudcore.utils.logging.context_vars import request_id_var, user_id_var
from crudcore.utils.structlog_config import get_logger

if TYPE_CHECKING:
    from werkzeug.wrappers.response import Response

REQUEST_ID_HEADER = "X-Request-ID"
_TRACE_ATTRIBUTE = "_request_trace"
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:-]{0,127}$")


@dataclass(slots=True)
class RequestTrace:
    """单个请求的追踪信息.

    Attributes:
        request_id: 请求标识,优先取自请求头.
        started_at: ``time.perf_counter`` 起点.
        bindings: 已设置的上下文变量及其 token,结束时逆序复位.

    """

    request_id: str
    started_at: float = field(default_factory=time.perf_counter)
    bindings: list[tuple[ContextVar[Any], Token[Any]]] = field(default_factory=list)

    @classmethod
    def start(cls, header_value: str | None) -> RequestTrace:
        trace = cls(request_id=_accept_request_id(header_value) or f"req_{uuid4().hex}")
        trace.bind(request_id_var, trace.request_id)
        trace.bind(user_id_var, _current_user_id())
        return trace

    def bind(self, var: ContextVar[Any], value: object) -> None:
        self.bindings.append((var, var.set(value)))

    def elapsed_ms(self) -> int:
        return round((time.perf_counter() - self.started_at) * 1000)

    def release(self) -> None:
        while self.bindings:
            var, token = self.bindings.pop()
            # token 在其他上下文中创建或已复位时忽略
            with suppress(ValueError, RuntimeError):
                var.reset(token)


def _accept_request_id(raw_value: str | None) -> str | None:
    value = (raw_value or "").strip()
    return value if _REQUEST_ID_PATTERN.match(value) else None


def _current_user_id() -> str | None:
    if not getattr(current_user, "is_authenticated", False):
        return None
    user_id = current_user.get_id()
    return str(user_id) if user_id is not None else None


def _dispatch_action() -> str | None:
    form_data = getattr(g, RequestAttribute.FORM_DATA, None) or {}
    action = form_data.get(DISPATCH_FIELD)
    return str(action) if action is not None else None


def register_request_logging(app: Flask) -> None:
    """注册请求追踪钩子."""

    @app.before_request
    def _start_trace() -> None:
        setattr(g, _TRACE_ATTRIBUTE, RequestTrace.start(request.headers.get(REQUEST_ID_HEADER)))

    @app.after_request
    def _log_completed(response: Response) -> Response:
        trace: RequestTrace | None = getattr(g, _TRACE_ATTRIBUTE, None)
        if trace is None:
            return response

        response.headers.setdefault(REQUEST_ID_HEADER, trace.request_id)
        get_logger("http").info(
            "http_request_completed",
            module="http",
            endpoint=request.endpoint,
            status_code=response.status_code,
            outcome="success" if response.status_code < 400 else "error",
            duration_ms=trace.elapsed_ms(),
            dispatch_action=_dispatch_action(),
            admin_name=current_admin_context().admin_name,
        )
        return response

    @app.teardown_request
    def _release_trace(_exc: BaseException | None) -> None:
        trace: RequestTrace | None = getattr(g, _TRACE_ATTRIBUTE, None)
        if trace is not None:
            trace.release()


__all__ = ["REQUEST_ID_HEADER", "RequestTrace", "register_request_logging"]
