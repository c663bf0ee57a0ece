"""Step definitions and the pydantic → field-error translation.

A step validator is a pure function ``draft -> {field_path: message}``.
An empty map means the step is valid. Paths are dotted from the draft
root (``address.postalCode``, ``specificFields.garageType``) so a form can
put each message next to its input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from pydantic import BaseModel, ValidationError

FieldErrors = dict[str, str]
StepValidator = Callable[[Mapping[str, Any]], FieldErrors]


@dataclass(frozen=True)
class StepDefinition:
    id: str
    title: str
    validate: StepValidator
    # Front-end component key; the backend never renders
    renderer: str


def errors_from_exception(exc: ValidationError, prefix: str = "") -> FieldErrors:
    """Flatten a pydantic ValidationError into one message per field path."""
    errors: FieldErrors = {}
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"])
        path = ".".join(p for p in (prefix, loc) if p)
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        # First message per path wins
        errors.setdefault(path or prefix, message)
    return errors


def validate_model(model: type[BaseModel], data: Any, prefix: str = "") -> FieldErrors:
    """Validate `data` against `model`; never mutates `data`."""
    try:
        model.model_validate(data)
    except ValidationError as exc:
        return errors_from_exception(exc, prefix)
    return {}


def section_slice(draft: Mapping[str, Any], keys: Iterable[str]) -> dict[str, Any]:
    """The part of the draft owned by one step; absent keys stay absent."""
    return {k: draft[k] for k in keys if k in draft}


def apply_boolean_defaults(model: type[BaseModel], data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a copy of `data` with absent/None boolean fields set to False.

    Keys are the model's input names (alias when one is declared), so an
    omitted checkbox is never reported as a missing required field.
    """
    normalized = dict(data or {})
    for name, info in model.model_fields.items():
        if info.annotation is bool:
            key = info.alias or name
            if normalized.get(key) is None:
                normalized[key] = False
    return normalized
