"""
Request bodies that may arrive as JSON or as multipart forms with an image.

Admin screens send multipart forms when an image is attached (nested values
JSON-encoded, see content_schemas.parse_json_field) and plain JSON otherwise.

Usage:
    fields, image = await read_payload(request)
    body = parse_model(LocationCreate, fields)
"""

from contextlib import contextmanager
from typing import Any, Iterator, TypeVar

from fastapi import Request, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile as FormFile

from shared.infrastructure.storage import delete_image, upload_image
from shared.utils.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

IMAGE_FIELD = "image"


async def read_payload(request: Request) -> tuple[dict[str, Any], UploadFile | None]:
    """
    Field values and the uploaded image (if any).

    Empty form fields are treated as not sent.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        image = form.get(IMAGE_FIELD)
        fields = {
            key: value
            for key, value in form.items()
            if key != IMAGE_FIELD and not (isinstance(value, str) and value == "")
        }
        # Form parsing yields Starlette upload objects
        if not isinstance(image, FormFile) or not image.filename:
            image = None
        return fields, image

    try:
        data = await request.json()
    except ValueError:
        raise ValidationError("El cuerpo de la solicitud no es JSON válido")
    if not isinstance(data, dict):
        raise ValidationError("El cuerpo de la solicitud debe ser un objeto")
    return data, None


def parse_model(schema: type[ModelT], fields: dict[str, Any]) -> ModelT:
    """Validate fields against a schema, reporting errors like a regular body."""
    try:
        return schema.model_validate(fields)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))


@contextmanager
def uploaded_image(image: UploadFile | None, folder: str) -> Iterator[str | None]:
    """
    Upload the image (if any) and yield its URL.

    The upload is removed again when the block fails, so a rejected
    create or update leaves no orphan image behind.
    """
    url = upload_image(image, folder) if image is not None else None
    try:
        yield url
    except Exception:
        delete_image(url)
        raise
