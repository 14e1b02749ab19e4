from typing import Any, List, Literal, get_args

from pydantic import BaseModel, ConfigDict

Op = Literal["=", "!=", ">", "<", "is", "!is", "in", "!in", "between"]
Dir = Literal["ASC", "DESC"]

ALLOWED_OPERATORS: frozenset[str] = frozenset(get_args(Op))


class FilterClause(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    op: Op
    value: Any


class SortClause(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    dir: Dir


class Page(BaseModel):
    model_config = ConfigDict(frozen=True)

    limit: Any = None
    offset: Any = 0

    @property
    def enabled(self) -> bool:
        # "0" arrives as text from the query string and counts as no limit.
        if isinstance(self.limit, str):
            return self.limit.strip() not in {"", "0"}
        return bool(self.limit)


class BuildRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_name: str
    filters: List[FilterClause] = []
    sort: List[SortClause] = []
    page: Page = Page()
