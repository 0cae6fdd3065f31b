"""配置驱动的 CRUD 请求处理核心."""

from crudcore.handlers.base import BaseEntityHandler, EntityHandler
from crudcore.handlers.config import (
    ConditionalFallbackCondition,
    HandlerConfig,
    LookupConfig,
    SimpleCondition,
    TableConfig,
    TableDefinition,
)
from crudcore.handlers.dispatcher import RequestDispatcher, fetch_post_data
from crudcore.handlers.insert_array import build_insert_array
from crudcore.handlers.lookup_conditions import build_lookup_conditions, ensure_search_queue
from crudcore.handlers.query_filters import apply_lookup_conditions
from crudcore.handlers.response_composer import FlaskTemplateRenderer, ResponseComposer, TemplateRenderer

__all__ = [
    "BaseEntityHandler",
    "ConditionalFallbackCondition",
    "EntityHandler",
    "FlaskTemplateRenderer",
    "HandlerConfig",
    "LookupConfig",
    "RequestDispatcher",
    "ResponseComposer",
    "SimpleCondition",
    "TableConfig",
    "TableDefinition",
    "TemplateRenderer",
    "apply_lookup_conditions",
    "build_insert_array",
    "build_lookup_conditions",
    "ensure_search_queue",
    "fetch_post_data",
]
