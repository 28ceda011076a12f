"""Shape validation for the compiled OpenAPI document.

Runs the document through the OpenAPI 3.0 models of openapi-pydantic to
check its shape before it is serialized.
"""

import copy
from typing import Any

from openapi_pydantic.v3.v3_0 import OpenAPI
from pydantic import ValidationError

from schema_compiler.errors import OpenApiShapeError


def _format_errors(error: ValidationError) -> dict[str, str]:
    return {".".join(str(part) for part in err["loc"]): err["msg"] for err in error.errors()}


def validate_openapi(data: dict[str, Any]) -> dict[str, str]:
    """Check an OpenAPI mapping against the 3.0 models.

    Returns dict of {location: error_message}, empty when the shape is valid.
    """
    try:
        OpenAPI.model_validate(data)
    except ValidationError as e:
        return _format_errors(e)
    return {}


def coerce_openapi(data: dict[str, Any]) -> dict[str, Any]:
    """Validate an OpenAPI mapping and return a plain-dict copy of it.

    The copy is taken from ``data`` rather than dumped from the model, so
    numeric constraints keep their original type and keys keep their order.
    """
    try:
        OpenAPI.model_validate(data)
    except ValidationError as e:
        errors = _format_errors(e)
        location, message = next(iter(errors.items()))
        raise OpenApiShapeError(
            f"OpenAPI document failed shape validation ({len(errors)} errors): {message}", field=location
        ) from e
    return copy.deepcopy(data)
