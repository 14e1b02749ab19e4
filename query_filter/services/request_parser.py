from __future__ import annotations

import logging
from typing import Any

from query_filter.core.config import ParserConfig
from query_filter.core.exceptions import NotCollectionError, TargetNotFoundError
from query_filter.schemas.query import BuildRequest, FilterClause, Page, SortClause
from query_filter.services.parsers import parse_filters, parse_pagination, parse_sort
from query_filter.services.query_builder import QueryBuilder, SelectQueryBuilder
from query_filter.services.registry import CollectionRegistry, is_collection
from query_filter.services.target_resolver import RequestContext, TargetResolver

_LOG = logging.getLogger("query_filter.parser")


def _offset_or_default(raw: Any) -> Any:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return 0
    return raw


class RequestParser:
    def __init__(
        self,
        context: RequestContext,
        *,
        config: ParserConfig | None = None,
        registry: CollectionRegistry | None = None,
    ):
        self.context = context
        self.config = config or ParserConfig()
        self.registry = registry or CollectionRegistry()
        self.resolver = TargetResolver(self.config, self.registry)
        self.model_name: str | None = None
        self.table_name: str | None = None
        self.page_limit: int | None = None

    def set_model(self, model_name: str) -> "RequestParser":
        self.model_name = model_name
        return self

    def set_table(self, table_name: str) -> "RequestParser":
        self.table_name = table_name
        return self

    def set_page_limit(self, page_limit: int) -> "RequestParser":
        self.page_limit = page_limit
        return self

    def build(self) -> QueryBuilder:
        request = self.build_request()
        builder = self._base_builder(request.target_name)
        builder = self._apply_filters(builder, request.filters)
        builder = self._apply_sort(builder, request.sort)
        return self._apply_page(builder, request.page)

    def build_request(self) -> BuildRequest:
        default_limit = self.page_limit or self.config.default_page_limit
        query = self.context.query
        raw_filter = query.get("filter")
        raw_sort = query.get("sort")
        raw_limit = query.get("limit", default_limit)
        raw_offset = query.get("offset")

        target_name = self.resolver.resolve(
            self.context,
            model_name=self.model_name,
            table_name=self.table_name,
        )
        return BuildRequest(
            target_name=target_name,
            filters=parse_filters({} if raw_filter is None else raw_filter),
            sort=parse_sort(None if raw_sort is None else str(raw_sort)),
            page=parse_pagination(raw_limit, _offset_or_default(raw_offset)),
        )

    def _base_builder(self, target_name: str) -> SelectQueryBuilder:
        if self.table_name and target_name == self.table_name:
            return SelectQueryBuilder.for_table(target_name)
        target = self.registry.resolve(target_name)
        if target is None:
            raise TargetNotFoundError([target_name])
        if not is_collection(target):
            raise NotCollectionError(target_name)
        _LOG.debug("Building query for %s request_id=%s", target_name, self.context.request_id)
        return SelectQueryBuilder.for_model(target)

    def _apply_filters(self, builder: Any, filters: list[FilterClause]) -> Any:
        for clause in filters:
            builder = builder.filter_apply(clause)
        return builder

    def _apply_sort(self, builder: Any, sort: list[SortClause]) -> Any:
        if not sort:
            return builder
        for clause in sort:
            builder = builder.order_by(clause.field, clause.dir)
        return builder

    def _apply_page(self, builder: Any, page: Page) -> Any:
        if page.enabled:
            return builder.limit(page.limit).offset(page.offset)
        return builder
