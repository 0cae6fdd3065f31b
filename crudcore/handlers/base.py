"""实体处理器接口.

分发器只依赖 ``EntityHandler`` 协议;``BaseEntityHandler`` 提供配置加载、
插入数组/查询条件构建与渲染等通用能力,具体实体(users、orders 等)只需实现业务钩子.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from flask import Request, Response

from crudcore.constants import ErrorMessages
from crudcore.handlers.config import HandlerConfig, TableConfig
from crudcore.handlers.insert_array import build_insert_array
from crudcore.handlers.lookup_conditions import build_lookup_conditions, ensure_search_queue
from crudcore.handlers.response_composer import ResponseComposer
from crudcore.types import DispatchResult, Failure, MutablePayloadDict


@runtime_checkable
class EntityHandler(Protocol):
    """分发器依赖的实体处理器能力集合."""

    table_config: TableConfig
    handler_config: HandlerConfig
    composer: ResponseComposer

    def default_response(self, request: Request, post_data: Mapping[str, Any]) -> Response:
        """渲染默认视图(GET 或不带 config 的 POST)."""
        ...

    def save(self, post_data: Mapping[str, Any]) -> DispatchResult:
        """保存提交的数据."""
        ...

    def update(self, entry: Mapping[str, Any]) -> DispatchResult:
        """更新已存在的记录."""
        ...

    def delete(self, post_data: Mapping[str, Any]) -> Response:
        """删除记录并自行生成 JSON 响应."""
        ...

    def generate_template_data(
        self,
        post_data: Mapping[str, Any],
        feedback: Mapping[str, Any] | None = None,
    ) -> Mapping[str, Any]:
        """返回模板需要的数据,不需要额外数据时返回空映射."""
        ...

    def get_lookup_result(
        self,
        request: Request,
        post_data: MutablePayloadDict,
        feedback: Mapping[str, Any] | None = None,
    ) -> Response:
        """根据搜索关键字返回查询结果."""
        ...

    def handle_extra_config(self, request: Request, post_data: Mapping[str, Any]) -> Response | Failure:
        """处理内置 submit/delete 之外的 config 取值."""
        ...


class BaseEntityHandler:
    """实体处理器基类.

    子类必须实现 ``default_response``、``save``、``delete``;其余钩子有默认实现.

    Attributes:
        table_config: 已校验的表配置.
        handler_config: 已校验的处理器配置.
        composer: 响应组装器.

    """

    def __init__(
        self,
        table_config: Mapping[str, Any] | TableConfig | None = None,
        handler_config: Mapping[str, Any] | HandlerConfig | None = None,
        composer: ResponseComposer | None = None,
    ) -> None:
        self.table_config = TableConfig.from_mapping(table_config)
        self.handler_config = HandlerConfig.from_mapping(handler_config)
        self.composer = composer or ResponseComposer()

    # ------------------------------------------------------------------ #
    # 需要子类实现的钩子
    # ------------------------------------------------------------------ #
    def default_response(self, request: Request, post_data: Mapping[str, Any]) -> Response:
        """渲染默认视图,必须由子类实现.

        Args:
            request: 当前请求.
            post_data: 已规范化的提交数据,GET 请求时为空映射.

        Returns:
            Response: 完整的 HTML 响应.

        Raises:
            NotImplementedError: 子类必须实现此方法.

        """
        raise NotImplementedError

    def save(self, post_data: Mapping[str, Any]) -> DispatchResult:
        """保存提交的数据,必须由子类实现.

        Args:
            post_data: 已规范化的提交数据,通常先经 ``generate_insert_array`` 过滤.

        Returns:
            DispatchResult: ``Success`` 的 payload 原样回传,``Failure`` 转为 400 信封.

        Raises:
            NotImplementedError: 子类必须实现此方法.

        """
        raise NotImplementedError

    def delete(self, post_data: Mapping[str, Any]) -> Response:
        """删除记录并生成完整的 JSON 响应,必须由子类实现.

        Args:
            post_data: 已规范化的提交数据.

        Returns:
            Response: 通常由 ``json_response`` 生成.

        Raises:
            NotImplementedError: 子类必须实现此方法.

        """
        raise NotImplementedError

    def update(self, entry: Mapping[str, Any]) -> DispatchResult:
        """更新已存在的记录,必须由子类实现.

        Args:
            entry: 包含主键字段的记录数据.

        Returns:
            DispatchResult: 更新结果.

        Raises:
            NotImplementedError: 子类必须实现此方法.

        """
        raise NotImplementedError

    def get_lookup_result(
        self,
        request: Request,
        post_data: MutablePayloadDict,
        feedback: Mapping[str, Any] | None = None,
    ) -> Response:
        """根据搜索关键字返回查询结果,必须由子类实现.

        Args:
            request: 当前请求.
            post_data: 提交数据,已保证包含搜索字段(缺省为空串).
            feedback: 附加给模板的反馈信息.

        Returns:
            Response: 查询结果响应.

        Raises:
            NotImplementedError: 子类必须实现此方法.

        """
        raise NotImplementedError

    # ------------------------------------------------------------------ #
    # 有默认实现的钩子
    # ------------------------------------------------------------------ #
    def generate_template_data(
        self,
        post_data: Mapping[str, Any],
        feedback: Mapping[str, Any] | None = None,
    ) -> Mapping[str, Any]:
        del post_data, feedback
        return {}

    def handle_extra_config(self, request: Request, post_data: Mapping[str, Any]) -> Response | Failure:
        del request
        return Failure.of(ErrorMessages.UNSUPPORTED_ACTION.format(action=post_data.get("config")))

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def generate_insert_array(self, table_key: str, post_data: Mapping[str, Any]) -> MutablePayloadDict:
        """按表配置过滤请求字段,得到可写库的数据."""
        return build_insert_array(self.table_config, table_key, post_data)

    def generate_lookup_conditions(self, post_data: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
        """按处理器配置与搜索关键字生成查询条件."""
        return build_lookup_conditions(self.handler_config, post_data)

    def render_html(self, template_name: str, attributes: Mapping[str, Any] | None = None) -> str:
        return self.composer.render_html(template_name, attributes)

    def json_response(
        self,
        template_name: str | None,
        status: int,
        attributes: Mapping[str, Any] | None = None,
        errors: list[str] | tuple[str, ...] | None = None,
    ) -> Response:
        return self.composer.json_response(template_name, status, attributes, errors)

    def html_response(self, template_name: str, post_data: Mapping[str, Any] | None = None) -> Response:
        return self.composer.html_response(self, template_name, post_data)

    def html_response_with_attributes(
        self,
        template_name: str,
        attributes: Mapping[str, Any] | None = None,
    ) -> Response:
        return self.composer.html_response_with_attributes(template_name, attributes)

    def handle_lookup(
        self,
        request: Request,
        post_data: MutablePayloadDict | None = None,
        feedback: Mapping[str, Any] | None = None,
    ) -> Response:
        """查询入口: 补齐搜索字段后交给 ``get_lookup_result``."""
        post_data = ensure_search_queue(self.handler_config, post_data if post_data is not None else {})
        return self.get_lookup_result(request, post_data, feedback or {})
