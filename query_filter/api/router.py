from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import DBAPIError
from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.orm import Session

from query_filter.api.deps import get_request_parser
from query_filter.core.exceptions import NotCollectionError, QueryBuilderError, TargetNotFoundError
from query_filter.db.session import get_db
from query_filter.services.request_parser import RequestParser
from query_filter.services.routing import ControllerRoute

_LOG = logging.getLogger("query_filter.api")

router = APIRouter(route_class=ControllerRoute)


def _serialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _serialize_value(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    return value


def _row_to_dict(row: Any) -> dict[str, Any]:
    if isinstance(row, dict):
        return _serialize_value(row)
    mapper = sa_inspect(type(row))
    return {column.key: _serialize_value(getattr(row, column.key)) for column in mapper.columns}


def run_collection_query(parser: RequestParser, db: Session) -> dict[str, Any]:
    try:
        builder = parser.build()
    except TargetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except (NotCollectionError, QueryBuilderError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    try:
        rows = builder.fetch_all(db)
    except DBAPIError as exc:
        _LOG.warning("Query execution failed: %s", exc.orig)
        raise HTTPException(status_code=400, detail="Query cannot be executed")
    return {"rows": [_row_to_dict(row) for row in rows]}


@router.get("/collections/{name}")
def query_collection(
    name: str,
    parser: RequestParser = Depends(get_request_parser),
    db: Session = Depends(get_db),
):
    return run_collection_query(parser, db)
