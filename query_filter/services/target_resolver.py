from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import Request

from query_filter.core.config import ParserConfig
from query_filter.core.exceptions import TargetNotFoundError
from query_filter.services.query_params import BracketQueryParams, QueryParamSource
from query_filter.services.registry import CollectionRegistry
from query_filter.services.routing import RouteController, controller_from_route

_LOG = logging.getLogger("query_filter.resolver")
_CONTROLLER_SUFFIX = "controller"


@dataclass
class RequestContext:
    query: QueryParamSource = field(default_factory=dict)
    path: str = ""
    route: Any = None
    request_id: str | None = None

    @classmethod
    def from_request(cls, request: Request) -> "RequestContext":
        return cls(
            query=BracketQueryParams(request.query_params),
            path=request.url.path,
            route=request.scope.get("route"),
            request_id=getattr(request.state, "request_id", None),
        )


def controller_candidate(controller: RouteController) -> str:
    class_name = type(controller).__name__
    if class_name.lower().endswith(_CONTROLLER_SUFFIX):
        return class_name[: -len(_CONTROLLER_SUFFIX)]
    return class_name


def path_candidate(path: str) -> str:
    without_query = (path or "").split("?", 1)[0]
    segments = [segment for segment in without_query.split("/") if segment]
    last = segments[-1].lower() if segments else ""
    return "".join(word[:1].upper() + word[1:] for word in last.split("_"))


class TargetResolver:
    def __init__(self, config: ParserConfig, registry: CollectionRegistry):
        self.config = config
        self.registry = registry

    def resolve(
        self,
        context: RequestContext,
        *,
        model_name: str | None = None,
        table_name: str | None = None,
    ) -> str:
        if model_name:
            return model_name
        if table_name:
            return table_name

        namespaces = list(self.config.model_namespaces)
        candidates: list[str] = []

        controller = controller_from_route(context.route)
        if controller is not None:
            candidate = controller_candidate(controller)
            candidates.append(candidate)
            resolved = self.registry.find(candidate, namespaces)
            if resolved:
                _LOG.debug(
                    "Resolved %s from controller %s request_id=%s",
                    resolved,
                    type(controller).__name__,
                    context.request_id,
                )
                return resolved

        candidate = path_candidate(context.path)
        candidates.append(candidate)
        resolved = self.registry.find(candidate, namespaces)
        if resolved:
            _LOG.debug("Resolved %s from path %s request_id=%s", resolved, context.path, context.request_id)
            return resolved

        attempted = [f"{namespace}.{name}" for name in candidates for namespace in namespaces]
        _LOG.info(
            "No collection found for path=%s attempted=%s request_id=%s",
            context.path,
            ", ".join(attempted),
            context.request_id,
        )
        raise TargetNotFoundError(attempted)
