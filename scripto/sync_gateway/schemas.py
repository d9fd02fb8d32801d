# @TASK P3-T3.1 - 백엔드 응답/요청 스키마
# @TEST tests/test_schemas.py

"""Backend request/response schemas.

Defines:
- JsonValue: a tagged union over the six JSON value kinds, used for the
  arbitrarily-typed ``data`` / ``metadata`` members of the envelope
- Envelope: ``{success, message, data, metadata}`` wrapper on every reply
- ErrorResponse: ``{success: false, message}`` failure body
- LoginResponse: token payload returned by ``POST /auth/login``
- RegisterRequest: body of ``POST /users/register``
- Wire*: the note document as the backend serializes it
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field, field_validator

from scripto.constants import DEFAULT_PRESSURE, ElementType

# ---------------------------------------------------------------------------
# JSON value tagged union
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class JsonNull:
    def to_python(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class JsonBool:
    value: bool

    def to_python(self) -> bool:
        return self.value


@dataclass(frozen=True, slots=True)
class JsonNumber:
    value: int | float

    def to_python(self) -> int | float:
        return self.value


@dataclass(frozen=True, slots=True)
class JsonString:
    value: str

    def to_python(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class JsonArray:
    items: tuple[JsonValue, ...] = ()

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self.items]


@dataclass(frozen=True, slots=True)
class JsonObject:
    fields: dict[str, JsonValue] = field(default_factory=dict)

    def get(self, key: str) -> JsonValue | None:
        return self.fields.get(key)

    def to_python(self) -> dict[str, Any]:
        return {key: value.to_python() for key, value in self.fields.items()}


JsonValue = JsonNull | JsonBool | JsonNumber | JsonString | JsonArray | JsonObject


def decode_json_value(obj: Any) -> JsonValue:
    """Convert a ``json.loads`` result into a :data:`JsonValue` tree.

    Raises:
        TypeError: If *obj* (or anything nested in it) is not a JSON type.
    """
    if obj is None:
        return JsonNull()
    # bool is a subclass of int and must be checked first
    if isinstance(obj, bool):
        return JsonBool(obj)
    if isinstance(obj, (int, float)):
        return JsonNumber(obj)
    if isinstance(obj, str):
        return JsonString(obj)
    if isinstance(obj, (list, tuple)):
        return JsonArray(tuple(decode_json_value(item) for item in obj))
    if isinstance(obj, dict):
        fields: dict[str, JsonValue] = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise TypeError(f"JSON object keys must be strings, got {type(key).__name__}")
            fields[key] = decode_json_value(value)
        return JsonObject(fields)
    raise TypeError(f"Not a JSON value: {type(obj).__name__}")


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class _EnvelopeModel(BaseModel):
    success: bool
    message: str = ""
    data: Any = None
    metadata: Any = None


@dataclass(frozen=True, slots=True)
class Envelope:
    """Generic success envelope with decoded ``data`` and ``metadata``."""

    success: bool
    message: str
    data: JsonValue
    metadata: JsonValue

    @classmethod
    def from_json(cls, body: str | bytes) -> Envelope:
        """Parse a reply body.

        Raises:
            ValueError: If *body* is not JSON or lacks the envelope members
                (pydantic's ``ValidationError`` is a ``ValueError``).
            TypeError: If the payload holds non-JSON values.
        """
        raw = _EnvelopeModel.model_validate_json(body)
        return cls(
            success=raw.success,
            message=raw.message,
            data=decode_json_value(raw.data),
            metadata=decode_json_value(raw.metadata),
        )


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class TokenData(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    success: bool
    message: str = ""
    data: TokenData


class RegisterRequest(BaseModel):
    email: str
    full_name: str
    password: str


# ---------------------------------------------------------------------------
# Note wire format
# ---------------------------------------------------------------------------


class WirePoint(BaseModel):
    x: float
    y: float
    pressure: float = DEFAULT_PRESSURE


class WireBounds(BaseModel):
    x: float
    y: float
    width: float
    height: float


class WireStrokeProperties(BaseModel):
    color: str
    width: float


class WireElementContent(BaseModel):
    points: list[WirePoint] = []


class WireElement(BaseModel):
    id: str | None = None
    type: ElementType
    content: WireElementContent = Field(default_factory=WireElementContent)
    bounds: WireBounds | None = None
    stroke_properties: WireStrokeProperties | None = None


class WireNote(BaseModel):
    """Note document as sent to and returned by ``/notes``.

    ``id`` is only present in replies; ``created`` / ``modified`` use the
    ``%Y-%m-%dT%H:%M:%S%z`` wire format.
    """

    id: str | None = None
    title: str = ""
    tags: list[str] = []
    subject: str = ""
    content: list[WireElement] = []
    created: str | None = None
    modified: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Some deployments use integer primary keys
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value
