"""
Response envelope shared by every endpoint.

Success:  {"success": true, "message"?: ..., "data"?: ..., <extra camelCase keys>}
Failure:  {"success": false, "message": ..., "data"?: ...} (see rest_api.core.errors)
"""

from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [_dump(v) for v in value]
    if isinstance(value, dict):
        return {k: _dump(v) for k, v in value.items()}
    return value


def ok(data: Any = None, message: str | None = None, **extra: Any) -> dict[str, Any]:
    """
    Build a success envelope.

    Pydantic models are dumped with their camelCase aliases; extra keyword
    arguments become top-level keys (count=3 -> "count": 3).
    """
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = _dump(data)
    for key, value in extra.items():
        body[to_camel(key)] = _dump(value)
    return jsonable_encoder(body)
