from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from query_filter.schemas.query import ALLOWED_OPERATORS, FilterClause, Page, SortClause

_LOG = logging.getLogger("query_filter.parser")
_SORT_FIELD_RE = re.compile(r"^-?([A-Za-z_]+)$")


def is_allowed_operator(operator: Any) -> bool:
    return isinstance(operator, str) and operator in ALLOWED_OPERATORS


def parse_filters(raw: Any) -> list[FilterClause]:
    if not isinstance(raw, Mapping):
        return []
    filters: list[FilterClause] = []
    for field, operator_values in raw.items():
        if not isinstance(operator_values, Mapping):
            _LOG.debug("Dropping filter %r: expected operator mapping, got %s", field, type(operator_values).__name__)
            continue
        for operator, value in operator_values.items():
            if not is_allowed_operator(operator):
                _LOG.debug("Dropping filter %r: operator %r is not allowed", field, operator)
                continue
            filters.append(FilterClause(field=str(field), op=operator, value=value))
    return filters


def parse_sort(raw: str | None) -> list[SortClause]:
    if raw is None:
        return []
    sort: list[SortClause] = []
    for token in str(raw).split(","):
        match = _SORT_FIELD_RE.fullmatch(token)
        if match is None:
            _LOG.debug("Dropping sort token %r", token)
            continue
        sort.append(SortClause(field=match.group(1), dir="DESC" if token.startswith("-") else "ASC"))
    return sort


def parse_pagination(limit: Any, offset: Any) -> Page:
    return Page(limit=limit, offset=offset)
