from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy import Select, asc, column, desc, literal_column, select, table
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import QueryableAttribute, Session

from query_filter.core.exceptions import QueryBuilderError
from query_filter.schemas.query import FilterClause


class QueryBuilder(Protocol):
    def filter_apply(self, clause: FilterClause) -> "QueryBuilder":
        ...

    def order_by(self, field: str, direction: str) -> "QueryBuilder":
        ...

    def limit(self, value: Any) -> "QueryBuilder":
        ...

    def offset(self, value: Any) -> "QueryBuilder":
        ...

    def to_executable(self) -> Any:
        ...


def _is_null_literal(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip().lower() == "null")


def _split_composite(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple, set)):
        return list(value)
    if isinstance(value, str):
        return [part.strip() for part in value.split(",")]
    return [value]


def _as_non_negative_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise QueryBuilderError(f'Invalid {name} value "{value}"')
    try:
        number = int(value.strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise QueryBuilderError(f'Invalid {name} value "{value}"')
    if number < 0:
        raise QueryBuilderError(f'Invalid {name} value "{value}"')
    return number


class SelectQueryBuilder:
    def __init__(self, statement: Select, *, model: type | None = None, table_name: str | None = None):
        self.statement = statement
        self.model = model
        self.table_name = table_name

    @classmethod
    def for_model(cls, model: type) -> "SelectQueryBuilder":
        return cls(select(model), model=model)

    @classmethod
    def for_table(cls, table_name: str) -> "SelectQueryBuilder":
        return cls(select(literal_column("*")).select_from(table(table_name)), table_name=table_name)

    def _replace(self, statement: Select) -> "SelectQueryBuilder":
        return SelectQueryBuilder(statement, model=self.model, table_name=self.table_name)

    def _column(self, field: str):
        if self.model is not None:
            attribute = getattr(self.model, field, None)
            if isinstance(attribute, QueryableAttribute):
                return attribute
        return column(field)

    def filter_apply(self, clause: FilterClause) -> "SelectQueryBuilder":
        col = self._column(clause.field)
        op, value = clause.op, clause.value
        if op == "=":
            condition = col == value
        elif op == "!=":
            condition = col != value
        elif op == ">":
            condition = col > value
        elif op == "<":
            condition = col < value
        elif op == "is":
            condition = col.is_(None) if _is_null_literal(value) else col == value
        elif op == "!is":
            condition = col.is_not(None) if _is_null_literal(value) else col != value
        elif op == "in":
            condition = col.in_(_split_composite(value))
        elif op == "!in":
            condition = col.not_in(_split_composite(value))
        elif op == "between":
            bounds = _split_composite(value)
            if len(bounds) != 2:
                raise QueryBuilderError(f'Filter "between" on "{clause.field}" needs exactly two values')
            condition = col.between(bounds[0], bounds[1])
        else:
            raise QueryBuilderError(f'Unsupported filter operator "{op}"')
        return self._replace(self.statement.where(condition))

    def order_by(self, field: str, direction: str) -> "SelectQueryBuilder":
        col = self._column(field)
        ordering = desc(col) if str(direction).upper() == "DESC" else asc(col)
        return self._replace(self.statement.order_by(ordering))

    def limit(self, value: Any) -> "SelectQueryBuilder":
        return self._replace(self.statement.limit(_as_non_negative_int(value, "limit")))

    def offset(self, value: Any) -> "SelectQueryBuilder":
        return self._replace(self.statement.offset(_as_non_negative_int(value, "offset")))

    def to_executable(self) -> Select:
        return self.statement

    def to_sql(self, dialect: Dialect | None = None) -> str:
        return str(self.statement.compile(dialect=dialect))

    def bindings(self, dialect: Dialect | None = None) -> dict[str, Any]:
        return dict(self.statement.compile(dialect=dialect).params)

    def fetch_all(self, db: Session) -> list[Any]:
        result = db.execute(self.statement)
        if self.model is not None:
            return list(result.scalars().all())
        return [dict(row) for row in result.mappings().all()]
