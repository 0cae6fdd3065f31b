"""请求分发器.

按请求方法与 POST 中的 ``config`` 判别字段,把请求路由到实体处理器的
默认视图、保存、删除或扩展钩子.每个请求只产生一个响应,不保留跨请求状态.

状态:
- GET                      -> default_response(request, {})
- POST 且无 config          -> default_response(request, post_data)
- POST config=submit       -> save -> 成功回显 / 400 信封
- POST config=delete       -> delete(由处理器自行生成 JSON)
- POST 其他 config          -> handle_extra_config -> 响应 / 400 信封
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from flask import Request, Response, g, jsonify, request
from flask.views import View
from werkzeug.wrappers import Response as BaseResponse

from crudcore.auth.context import capture_admin_context, resolve_csrf_guard
from crudcore.constants import DISPATCH_FIELD, DispatchAction, HttpMethod, HttpStatus, RequestAttribute
from crudcore.errors import ValidationError
from crudcore.handlers.base import EntityHandler
from crudcore.handlers.lookup_conditions import ensure_search_queue
from crudcore.types import Failure, MutablePayloadDict, Success
from crudcore.utils.request_payload import parse_payload
from crudcore.utils.structlog_config import get_logger

logger = get_logger("dispatcher")


def fetch_post_data(req: Request) -> MutablePayloadDict:
    """获取 POST 数据.

    优先使用表单中间件预处理并挂载的数据;为空时回退到请求已解析的 body;都没有时返回空字典.
    """
    form_data = getattr(g, RequestAttribute.FORM_DATA, None)
    if form_data:
        return dict(form_data)

    if req.is_json:
        parsed = req.get_json(silent=True)
        return parse_payload(parsed) if isinstance(parsed, Mapping) else {}
    if req.form:
        return parse_payload(req.form)
    return {}


class RequestDispatcher(View):
    """实体处理器的通用分发视图.

    通过依赖注入组合实体处理器:

        app.add_url_rule("/users", view_func=RequestDispatcher.as_view("users", handler=UsersHandler(...)))

    Attributes:
        handler: 实体处理器.

    """

    methods: ClassVar[list[str]] = [HttpMethod.GET, HttpMethod.POST]
    # 处理器在注册时构造一次,配置在进程内只读
    init_every_request: ClassVar[bool] = False

    def __init__(self, handler: EntityHandler) -> None:
        if not isinstance(handler, EntityHandler):
            raise TypeError(f"{type(handler).__name__} 未实现 EntityHandler 协议")
        self.handler = handler

    def dispatch_request(self, **kwargs: Any) -> Response:
        del kwargs
        return self.handle(request)

    # ------------------------------------------------------------------ #
    # 主流程
    # ------------------------------------------------------------------ #
    def handle(self, req: Request) -> Response:
        """处理单个请求并返回唯一响应."""
        capture_admin_context(self.handler.composer.auth_provider)

        if req.method != HttpMethod.POST:
            self._attach_csrf_token()
            logger.debug("分发默认视图", module="dispatcher", state="get_default")
            return self.handler.default_response(req, {})

        return self.handle_post(req)

    def handle_post(self, req: Request) -> Response:
        post_data = fetch_post_data(req)

        if DISPATCH_FIELD not in post_data:
            # 普通表单提交,不是 AJAX 动作
            logger.debug("分发默认视图", module="dispatcher", state="post_no_config")
            return self.handler.default_response(req, post_data)

        action = post_data[DISPATCH_FIELD]
        try:
            if action == DispatchAction.SUBMIT.value:
                logger.debug("分发保存动作", module="dispatcher", state="post_submit")
                return self._handle_submit(post_data)
            if action == DispatchAction.DELETE.value:
                logger.debug("分发删除动作", module="dispatcher", state="post_delete")
                return self.handler.delete(post_data)

            logger.debug("分发扩展动作", module="dispatcher", state="post_extra", action=str(action))
            result = self.handler.handle_extra_config(req, post_data)
        except ValidationError as exc:
            return self._failure_response(Failure.of(exc.message), action=action)

        if isinstance(result, Failure):
            return self._failure_response(result, action=action)
        if isinstance(result, BaseResponse):
            return result
        raise TypeError(f"handle_extra_config 必须返回 Response 或 Failure, 实际为 {type(result).__name__}")

    def handle_lookup(
        self,
        req: Request,
        post_data: MutablePayloadDict | None = None,
        feedback: Mapping[str, Any] | None = None,
    ) -> Response:
        """查询入口: 保证搜索字段存在(缺省空串)后交给处理器的 ``get_lookup_result``."""
        post_data = ensure_search_queue(self.handler.handler_config, post_data if post_data is not None else {})
        return self.handler.get_lookup_result(req, post_data, feedback or {})

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _handle_submit(self, post_data: MutablePayloadDict) -> Response:
        result = self.handler.save(post_data)
        if isinstance(result, Success):
            response = jsonify(result.payload)
            response.status_code = int(result.status)
            return response
        if isinstance(result, Failure):
            return self._failure_response(result, action=DispatchAction.SUBMIT.value)
        raise TypeError(f"save 必须返回 Success 或 Failure, 实际为 {type(result).__name__}")

    def _failure_response(self, failure: Failure, *, action: object) -> Response:
        logger.warning(
            "请求动作失败",
            module="dispatcher",
            action=str(action),
            message_count=len(failure.messages),
        )
        return self.handler.composer.json_response(None, HttpStatus.BAD_REQUEST, None, failure.messages)

    @staticmethod
    def _attach_csrf_token() -> None:
        guard = resolve_csrf_guard()
        if guard is None:
            return
        setattr(g, RequestAttribute.CSRF_TOKEN, guard.generate_token())
