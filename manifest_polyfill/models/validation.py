"""Turn pydantic validation failures on upstream JSON into ``ShapeError``."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from manifest_polyfill.errors import ShapeError

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_shape(model: type[ModelT], data: Any, *, source: str) -> ModelT:
    """Validate ``data`` as ``model``, naming ``source`` in the error."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ShapeError(f"Unexpected shape in {source}: {exc}") from exc
