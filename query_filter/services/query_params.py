from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Iterable, Protocol
from urllib.parse import parse_qsl

_BRACKET_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_BRACKET_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")


class QueryParamSource(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...


def _query_pairs(source: Any) -> Iterable[tuple[str, Any]]:
    if source is None:
        return []
    if isinstance(source, (str, bytes)):
        text = source.decode("latin-1") if isinstance(source, bytes) else source
        return parse_qsl(text.lstrip("?"), keep_blank_values=True)
    if hasattr(source, "multi_items"):
        return source.multi_items()
    if isinstance(source, Mapping):
        return source.items()
    return source


def _assign(container: dict[str, Any], path: list[str], value: Any) -> None:
    node: Any = container
    for segment, following in zip(path, path[1:]):
        wants_list = following == ""
        if isinstance(node, list):
            child: Any = [] if wants_list else {}
            node.append(child)
        else:
            child = node.get(segment)
            if not isinstance(child, (dict, list)) or wants_list != isinstance(child, list):
                child = [] if wants_list else {}
                node[segment] = child
        node = child
    if isinstance(node, list):
        node.append(value)
    else:
        node[path[-1]] = value


def decode_bracket_params(source: Any) -> dict[str, Any]:
    decoded: dict[str, Any] = {}
    for raw_key, value in _query_pairs(source):
        match = _BRACKET_KEY_RE.match(str(raw_key))
        if match is None:
            decoded[str(raw_key)] = value
            continue
        path = [match.group(1), *_BRACKET_SEGMENT_RE.findall(match.group(2))]
        _assign(decoded, path, value)
    return decoded


class BracketQueryParams:
    """Nested view over a flat query string, e.g. ``filter[x][is]=1``."""

    def __init__(self, source: Any = None):
        self._data = decode_bracket_params(source)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)
