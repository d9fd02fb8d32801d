# @TASK P3-T3.2 - Note <-> 백엔드 JSON 변환
# @TEST tests/test_wire.py

"""Conversion between :class:`~scripto.models.Note` and the backend schema.

Outgoing notes have every element's points run through
:func:`~scripto.utils.stroke_codec.optimize`; the in-memory note is left
untouched.  Incoming notes arrive as the ``data`` member of the reply
envelope and are re-interpreted from the generic :data:`JsonValue` tree.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from scripto.constants import STROKE_THINNING_THRESHOLD
from scripto.models import Note, NoteElement, Rect, Saved, StrokePoint, StrokeProperties
from scripto.sync_gateway.errors import MalformedResponse
from scripto.sync_gateway.schemas import (
    JsonObject,
    JsonValue,
    WireBounds,
    WireElement,
    WireElementContent,
    WireNote,
    WirePoint,
    WireStrokeProperties,
)
from scripto.utils.datetime_utils import format_wire_datetime, parse_wire_datetime
from scripto.utils.stroke_codec import optimize

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_element(element: NoteElement, threshold: float = STROKE_THINNING_THRESHOLD) -> WireElement:
    points = optimize(element.content, threshold)
    style = element.stroke_properties
    return WireElement(
        id=element.id,
        type=element.type,
        content=WireElementContent(
            points=[WirePoint(x=p.x, y=p.y, pressure=p.pressure) for p in points],
        ),
        bounds=WireBounds(**element.bounds.model_dump()),
        stroke_properties=WireStrokeProperties(**style.model_dump()) if style else None,
    )


def encode_note(note: Note, threshold: float = STROKE_THINNING_THRESHOLD) -> dict[str, Any]:
    """Build the JSON request body for ``/notes``.

    Tags are sent sorted so identical notes produce identical bodies.
    Elements without stroke properties omit the ``stroke_properties`` key.
    """
    wire = WireNote(
        title=note.title,
        tags=sorted(note.tags),
        subject=note.subject,
        content=[encode_element(element, threshold) for element in note.content],
        created=format_wire_datetime(note.created_at),
        modified=format_wire_datetime(note.modified_at),
    )
    return wire.model_dump(mode="json", exclude_none=True)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _decode_element(wire: WireElement, fallback_id: str | None) -> NoteElement:
    points = tuple(StrokePoint(x=p.x, y=p.y, pressure=p.pressure) for p in wire.content.points)
    fields: dict[str, Any] = {
        "type": wire.type,
        "content": points,
        "bounds": Rect(**wire.bounds.model_dump()) if wire.bounds else Rect.enclosing(points),
        "stroke_properties": (
            StrokeProperties(**wire.stroke_properties.model_dump()) if wire.stroke_properties else None
        ),
    }
    element_id = wire.id or fallback_id
    if element_id:
        fields["id"] = element_id
    return NoteElement(**fields)


def decode_note(data: JsonValue, previous: Note) -> Note:
    """Rebuild a note from the ``data`` member of a save reply.

    The local ``id`` of *previous* is kept.  The identity becomes
    ``Saved`` with the id from the payload, or keeps the previously saved
    id when the payload has none.  Neither timestamp moves backwards; the
    wire format drops sub-second precision.

    Raises:
        MalformedResponse: If *data* does not describe a note.
    """
    if not isinstance(data, JsonObject):
        raise MalformedResponse("Response data is not a note object")

    try:
        wire = WireNote.model_validate(data.to_python())
    except ValidationError as exc:
        logger.warning("Note payload failed validation: %s", exc)
        raise MalformedResponse("Response data is not a valid note") from exc

    server_id = wire.id or previous.server_id
    if not server_id:
        raise MalformedResponse("Response note has no id")

    try:
        created = parse_wire_datetime(wire.created) if wire.created else previous.created_at
        modified = parse_wire_datetime(wire.modified) if wire.modified else previous.modified_at
    except ValueError as exc:
        raise MalformedResponse(f"Invalid timestamp in response: {exc}") from exc
    created = max(created, previous.created_at)

    elements = []
    for index, wire_element in enumerate(wire.content):
        fallback_id = previous.content[index].id if index < len(previous.content) else None
        elements.append(_decode_element(wire_element, fallback_id))

    return Note(
        id=previous.id,
        identity=Saved(server_id=server_id),
        title=wire.title,
        tags=frozenset(wire.tags),
        subject=wire.subject,
        content=tuple(elements),
        created_at=created,
        modified_at=max(modified, previous.modified_at, created),
    )
