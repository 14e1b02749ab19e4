from __future__ import annotations

import logging
import pkgutil
from collections.abc import Mapping, Sequence
from typing import Any

from fastapi import APIRouter
from fastapi.routing import APIRoute

_LOG = logging.getLogger("query_filter.routing")


class RouteController:
    def register(
        self,
        router: APIRouter,
        path: str,
        method_name: str = "index",
        methods: Sequence[str] = ("GET",),
        **route_kwargs: Any,
    ) -> None:
        router.add_api_route(
            path,
            getattr(self, method_name),
            methods=list(methods),
            route_class_override=ControllerRoute,
            **route_kwargs,
        )


class ControllerRoute(APIRoute):
    def __init__(self, path: str, endpoint, **kwargs: Any):
        super().__init__(path, endpoint, **kwargs)
        owner = getattr(endpoint, "__self__", None)
        self.controller: RouteController | None = owner if isinstance(owner, RouteController) else None


def _controller_from_descriptor(descriptor: Any) -> RouteController | None:
    if isinstance(descriptor, Mapping):
        descriptor = descriptor.get("uses")
    if not isinstance(descriptor, str):
        # Closures and other callables carry no controller.
        return None
    type_name = descriptor.split("@", 1)[0].strip()
    try:
        handler_type = pkgutil.resolve_name(type_name)
    except (ImportError, AttributeError, ValueError):
        _LOG.debug("Route handler %s cannot be imported", type_name)
        return None
    if not (isinstance(handler_type, type) and issubclass(handler_type, RouteController)):
        _LOG.debug("Route handler %s is not a RouteController", type_name)
        return None
    return handler_type()


def controller_from_route(route: Any) -> RouteController | None:
    if route is None:
        return None
    if isinstance(route, (tuple, list)):
        return _controller_from_descriptor(route[0]) if route else None
    if isinstance(route, Mapping):
        return _controller_from_descriptor(route)
    controller = getattr(route, "controller", None)
    return controller if isinstance(controller, RouteController) else None
