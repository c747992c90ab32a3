"""Firestore serialization helpers.

Handles conversion between Python snake_case and the camelCase keys the web
client writes. A few keys keep their acronym casing (``photoURL``).
"""

import re
from typing import Any

from pydantic import BaseModel

_CAMEL_OVERRIDES = {
    "photo_url": "photoURL",
}
_SNAKE_OVERRIDES = {v: k for k, v in _CAMEL_OVERRIDES.items()}


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    if string in _CAMEL_OVERRIDES:
        return _CAMEL_OVERRIDES[string]
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def to_snake(string: str) -> str:
    """Convert camelCase to snake_case."""
    if string in _SNAKE_OVERRIDES:
        return _SNAKE_OVERRIDES[string]
    return re.sub(r"(?<!^)(?=[A-Z])", "_", string).lower()


def model_to_firestore(model: BaseModel, *, partial: bool = False) -> dict[str, Any]:
    """Convert a pydantic model to Firestore document format.

    With ``partial`` only fields that were explicitly set and are not None
    are emitted, which is what a merge write expects.
    """
    data = model.model_dump(mode="python", exclude_unset=partial, exclude_none=partial)
    return fields_to_firestore(data)


def fields_to_firestore(data: dict[str, Any]) -> dict[str, Any]:
    """Convert a snake_case field mapping to Firestore keys."""
    return {to_camel(key): value for key, value in data.items()}


def firestore_to_dict(data: dict[str, Any] | None) -> dict[str, Any]:
    """Convert Firestore document to snake_case dict for pydantic parsing."""
    if not data:
        return {}
    return {to_snake(key): value for key, value in data.items()}
