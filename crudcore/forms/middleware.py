"""表单数据预处理中间件.

AJAX 提交的数据可能只存在于原始请求体中(未被 Werkzeug 解析为 form),
这里在请求进入视图前统一解析并挂载到 ``g.form_data``,分发器优先使用该数据.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from urllib.parse import parse_qsl

from flask import Flask, Request, g, request
from werkzeug.datastructures import MultiDict

from crudcore.constants import HttpMethod, RequestAttribute
from crudcore.types import MutablePayloadDict
from crudcore.utils.request_payload import parse_payload
from crudcore.utils.structlog_config import get_logger

logger = get_logger("forms")


def _decode_raw_body(req: Request) -> object | None:
    raw = req.get_data(cache=True, as_text=True)
    if not raw or not raw.strip():
        return None
    stripped = raw.strip()
    if stripped.startswith("{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return None
    return MultiDict(parse_qsl(stripped, keep_blank_values=True))


def extract_form_data(req: Request) -> MutablePayloadDict:
    """从请求中提取规范化后的表单数据.

    优先级: JSON 对象 > 已解析的 form > 原始请求体(JSON 或 urlencoded).
    """
    payload: object | None = None
    if req.is_json:
        payload = req.get_json(silent=True)
    elif req.form:
        payload = req.form
    else:
        payload = _decode_raw_body(req)

    if not isinstance(payload, Mapping) and not hasattr(payload, "getlist"):
        return {}
    return parse_payload(payload)


def register_form_middleware(app: Flask) -> None:
    """注册 POST 请求的表单预处理钩子."""

    @app.before_request
    def _attach_form_data() -> None:
        if request.method != HttpMethod.POST:
            return
        form_data = extract_form_data(request)
        setattr(g, RequestAttribute.FORM_DATA, form_data)
        logger.debug("表单数据已预处理", module="forms", field_count=len(form_data))
