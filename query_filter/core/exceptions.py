from __future__ import annotations


class QueryFilterError(Exception):
    pass


class TargetNotFoundError(QueryFilterError):
    def __init__(self, attempted: list[str]):
        self.attempted = list(attempted)
        super().__init__("Model not found after looking on " + ", ".join(self.attempted))


class NotCollectionError(QueryFilterError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} is not a queryable collection")


class QueryBuilderError(QueryFilterError, ValueError):
    pass
