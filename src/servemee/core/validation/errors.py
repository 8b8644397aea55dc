"""Field-level validation errors shared by the DTOs and the HTTP layer."""

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

VALIDATION_FAILED = "Validation failed"

# pydantic's wording for the few cases clients see most
_MESSAGES = {
    "extra_forbidden": "Field is not allowed",
    "missing": "Field is required",
}


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str
    type: str


class DtoValidationError(ValueError):
    """An inbound request failed validation; nothing was applied."""

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__(VALIDATION_FAILED)
        self.errors = errors

    @property
    def fields(self) -> set[str]:
        return {e.field for e in self.errors}

    def to_response(self) -> dict[str, Any]:
        return {
            "message": VALIDATION_FAILED,
            "errors": [asdict(e) for e in self.errors],
        }

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "DtoValidationError":
        return cls(field_errors(exc.errors()))


def _field_name(loc: tuple[Any, ...]) -> str:
    # request bodies arrive as ("body", "<field>", ...)
    parts = [str(p) for p in loc if p != "body"]
    if not parts:
        return "body"
    return ".".join(to_camel(p) if "_" in p else p for p in parts)


def _message(error: Mapping[str, Any]) -> str:
    if error["type"] in _MESSAGES:
        return _MESSAGES[error["type"]]
    msg = str(error.get("msg", "Invalid value"))
    return msg.removeprefix("Value error, ")


def field_errors(errors: Iterable[Mapping[str, Any]]) -> list[FieldError]:
    """Convert pydantic error dicts into camelCase ``FieldError`` records."""
    return [
        FieldError(
            field=_field_name(tuple(e.get("loc", ()))),
            message=_message(e),
            type=str(e["type"]),
        )
        for e in errors
    ]
