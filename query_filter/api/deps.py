from __future__ import annotations

from fastapi import Depends, Request

from query_filter.core.config import ParserConfig
from query_filter.services.registry import CollectionRegistry
from query_filter.services.request_parser import RequestParser
from query_filter.services.target_resolver import RequestContext


def get_parser_config(request: Request) -> ParserConfig:
    return request.app.state.parser_config


def get_registry(request: Request, config: ParserConfig = Depends(get_parser_config)) -> CollectionRegistry:
    state = request.app.state
    if state.registry is None:
        state.registry = CollectionRegistry.from_packages(config.model_namespaces)
    return state.registry


def get_request_parser(
    request: Request,
    config: ParserConfig = Depends(get_parser_config),
    registry: CollectionRegistry = Depends(get_registry),
) -> RequestParser:
    return RequestParser(RequestContext.from_request(request), config=config, registry=registry)
