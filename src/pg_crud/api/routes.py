"""Generic admin endpoints over the whitelisted tables.

Route handlers only parse the request and serialize the engine's result;
every engine error is rendered by the exception handlers in ``app.py``.
"""

import json
from typing import Any

from fastapi import APIRouter, Depends, Request, status

from pg_crud.models.errors import ValidationError
from pg_crud.services.row_operations import DELETED_MESSAGE, UPDATED_MESSAGE, RowOperations

router = APIRouter()

BODY_NOT_OBJECT_MESSAGE = "Request body must be a JSON object."


def get_engine(request: Request) -> RowOperations:
    """Provide the engine built at startup (or injected by ``create_app``)."""
    return request.app.state.engine


async def get_payload(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object; a missing body is ``{}``."""
    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise ValidationError(BODY_NOT_OBJECT_MESSAGE, details=str(e)) from e
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError(BODY_NOT_OBJECT_MESSAGE)
    return payload


@router.get("/meta")
async def get_meta(engine: RowOperations = Depends(get_engine)) -> dict:
    tables = await engine.list_tables()
    return {"tables": [table.to_dict() for table in tables]}


@router.get("/table/{table}")
async def list_rows(table: str, engine: RowOperations = Depends(get_engine)) -> dict:
    rows = await engine.list_rows(table)
    return {"rows": rows}


@router.post("/table/{table}", status_code=status.HTTP_201_CREATED)
async def create_row(
    table: str,
    payload: dict[str, Any] = Depends(get_payload),
    engine: RowOperations = Depends(get_engine),
) -> dict:
    result = await engine.create_row(table, payload)
    return result.to_dict()


@router.put("/table/{table}/{row_id}")
async def update_row(
    table: str,
    row_id: str,
    payload: dict[str, Any] = Depends(get_payload),
    engine: RowOperations = Depends(get_engine),
) -> dict:
    row = await engine.update_row(table, row_id, payload)
    return {"message": UPDATED_MESSAGE, "row": row}


@router.delete("/table/{table}/{row_id}")
async def delete_row(
    table: str,
    row_id: str,
    engine: RowOperations = Depends(get_engine),
) -> dict:
    await engine.delete_row(table, row_id)
    return {"message": DELETED_MESSAGE}
