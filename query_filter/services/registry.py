from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy.orm import DeclarativeBase

_LOG = logging.getLogger("query_filter.registry")


def is_collection(target: Any) -> bool:
    return (
        isinstance(target, type)
        and issubclass(target, DeclarativeBase)
        and getattr(target, "__table__", None) is not None
    )


def _classes_defined_in(module: Any) -> list[type]:
    return [
        member
        for _, member in inspect.getmembers(module, inspect.isclass)
        if member.__module__ == module.__name__
    ]


class CollectionRegistry:
    def __init__(self, namespaces: Mapping[str, Iterable[type]] | None = None):
        self._types: dict[str, dict[str, type]] = {}
        for namespace, types in (namespaces or {}).items():
            self._types.setdefault(namespace, {})
            for target in types:
                self.register(namespace, target)

    def register(self, namespace: str, target: type, name: str | None = None) -> str:
        simple_name = name or target.__name__
        self._types.setdefault(namespace, {})[simple_name] = target
        return f"{namespace}.{simple_name}"

    def namespaces(self) -> list[str]:
        return list(self._types)

    def list_types_in_namespace(self, namespace: str) -> list[str]:
        return [f"{namespace}.{name}" for name in self._types.get(namespace, {})]

    def find(self, candidate: str, namespaces: Iterable[str]) -> str | None:
        for namespace in namespaces:
            wanted = f"{namespace}.{candidate}"
            for qualified_name in self.list_types_in_namespace(namespace):
                if qualified_name == wanted:
                    return qualified_name
        return None

    def get(self, qualified_name: str) -> type | None:
        namespace, _, simple_name = qualified_name.rpartition(".")
        return self._types.get(namespace, {}).get(simple_name)

    def resolve(self, qualified_name: str) -> Any:
        target = self.get(qualified_name)
        if target is not None:
            return target
        try:
            return pkgutil.resolve_name(qualified_name)
        except (ImportError, AttributeError, ValueError):
            return None

    @classmethod
    def from_packages(cls, namespaces: Iterable[str]) -> "CollectionRegistry":
        registry = cls()
        for namespace in namespaces:
            registry._types.setdefault(namespace, {})
            try:
                package = importlib.import_module(namespace)
            except ModuleNotFoundError as exc:
                if not exc.name or not (namespace == exc.name or namespace.startswith(f"{exc.name}.")):
                    raise
                _LOG.warning("Collection namespace %s cannot be imported; skipping", namespace)
                continue
            modules = [package]
            for module_info in pkgutil.iter_modules(getattr(package, "__path__", [])):
                if module_info.name.startswith("_"):
                    continue
                modules.append(importlib.import_module(f"{namespace}.{module_info.name}"))
            for module in modules:
                for target in _classes_defined_in(module):
                    registry.register(namespace, target)
            _LOG.debug("Registered %d types in %s", len(registry._types[namespace]), namespace)
        return registry
