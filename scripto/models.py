# @TASK P1-T1.2 - 노트 문서 모델
# @TEST tests/test_models.py

"""Versioned note document model.

A :class:`Note` is an ordered sequence of :class:`NoteElement` objects
plus metadata.  Element order is drawing order and is preserved through
every transformation and through the wire round trip.

All models are frozen pydantic models: mutations return new instances.
Structural equality on :class:`Note` ignores ``created_at`` and
``modified_at`` -- timestamps are metadata, not identity.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Annotated, Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from scripto.constants import (
    DEFAULT_PRESSURE,
    DEFAULT_STROKE_COLOR,
    DEFAULT_STROKE_WIDTH,
    ElementType,
)
from scripto.utils.datetime_utils import ensure_utc, utc_now


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class StrokePoint(_FrozenModel):
    """A single pointer sample.

    Attributes:
        x: Horizontal coordinate.
        y: Vertical coordinate.
        pressure: Stylus pressure, ``1.0`` when the device reports none.
    """

    x: float
    y: float
    pressure: float = DEFAULT_PRESSURE


class Rect(_FrozenModel):
    """Axis-aligned rectangle (origin + extent)."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def enclosing(cls, points: Iterable[StrokePoint]) -> Rect:
        """Return the minimal rectangle covering all *points*.

        A single point yields a zero-area rectangle at that point; an empty
        sequence yields the zero rectangle at the origin.
        """
        pts = list(points)
        if not pts:
            return cls()
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        min_x, min_y = min(xs), min(ys)
        return cls(x=min_x, y=min_y, width=max(xs) - min_x, height=max(ys) - min_y)


class StrokeProperties(_FrozenModel):
    color: str = DEFAULT_STROKE_COLOR
    width: float = DEFAULT_STROKE_WIDTH


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------


class NoteElement(_FrozenModel):
    """One discrete content unit inside a note.

    ``bounds`` is derived from ``content`` when not given explicitly.
    ``stroke_properties`` of ``None`` means the element inherits the
    default style.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: ElementType = ElementType.DRAWING
    content: tuple[StrokePoint, ...] = ()
    bounds: Rect
    stroke_properties: StrokeProperties | None = None

    @model_validator(mode="before")
    @classmethod
    def _derive_bounds(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("bounds") is None:
            points = [
                p if isinstance(p, StrokePoint) else StrokePoint.model_validate(p)
                for p in data.get("content", ())
            ]
            data = {**data, "bounds": Rect.enclosing(points)}
        return data

    @classmethod
    def begin_stroke(
        cls,
        point: StrokePoint,
        stroke_properties: StrokeProperties | None = None,
    ) -> NoteElement:
        """Start a new drawing element from its first sample."""
        return cls(
            type=ElementType.DRAWING,
            content=(point,),
            stroke_properties=stroke_properties or StrokeProperties(),
        )

    def with_point(self, point: StrokePoint) -> NoteElement:
        """Return a copy with *point* appended and bounds recomputed."""
        return self.with_content((*self.content, point))

    def with_content(self, points: Iterable[StrokePoint]) -> NoteElement:
        content = tuple(points)
        return self.model_copy(update={"content": content, "bounds": Rect.enclosing(content)})


# ---------------------------------------------------------------------------
# Server identity
# ---------------------------------------------------------------------------


class Unsaved(_FrozenModel):
    """The note has never been stored by the backend."""

    kind: Literal["unsaved"] = "unsaved"


class Saved(_FrozenModel):
    """The note exists on the backend under ``server_id``."""

    kind: Literal["saved"] = "saved"
    server_id: str


NoteIdentity = Annotated[Unsaved | Saved, Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Note
# ---------------------------------------------------------------------------


class Note(_FrozenModel):
    """A note document.

    Attributes:
        id: Local identifier, assigned once at creation and never changed.
        identity: :class:`Unsaved` until the backend has stored the note,
            then :class:`Saved` carrying the server-side id.
        title: Free text title.
        tags: Unordered set of labels.
        subject: Free text classification.
        content: Elements in drawing order.
        created_at: Creation time (UTC).
        modified_at: Last local mutation time (UTC), never before
            ``created_at`` and never moving backwards.
    """

    id: UUID = Field(default_factory=uuid4)
    identity: NoteIdentity = Field(default_factory=Unsaved)
    title: str = ""
    tags: frozenset[str] = frozenset()
    subject: str = ""
    content: tuple[NoteElement, ...] = ()
    created_at: datetime = Field(default_factory=utc_now)
    modified_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "modified_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_timestamps(self) -> Note:
        if self.modified_at < self.created_at:
            raise ValueError("modified_at must not precede created_at")
        return self

    @classmethod
    def empty(cls) -> Note:
        """Return a blank, unsaved note stamped with the current time."""
        now = utc_now()
        return cls(created_at=now, modified_at=now)

    # -- equality ------------------------------------------------------

    def _identity_key(self) -> tuple:
        return (self.id, self.identity, self.title, self.tags, self.subject, self.content)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Note):
            return NotImplemented
        return self._identity_key() == other._identity_key()

    def __hash__(self) -> int:
        return hash(self._identity_key())

    # -- identity ------------------------------------------------------

    @property
    def is_saved(self) -> bool:
        return isinstance(self.identity, Saved)

    @property
    def server_id(self) -> str | None:
        return self.identity.server_id if isinstance(self.identity, Saved) else None

    def with_server_id(self, server_id: str) -> Note:
        return self.model_copy(update={"identity": Saved(server_id=server_id)})

    # -- mutations -----------------------------------------------------

    def touch(self, now: datetime | None = None) -> Note:
        """Advance ``modified_at`` to *now* (default: current time).

        A clock that reads earlier than the stored value leaves it unchanged.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        return self.model_copy(update={"modified_at": max(self.modified_at, now)})

    def with_element(self, element: NoteElement) -> Note:
        """Return a touched copy with *element* appended to the content."""
        return self.model_copy(update={"content": (*self.content, element)}).touch()

    def with_updated_last_element(
        self,
        transform: Callable[[NoteElement], NoteElement],
    ) -> Note:
        """Apply *transform* to the most recent element.

        The element's bounds are recomputed from its content afterwards.

        Raises:
            ValueError: If the note has no elements.
        """
        if not self.content:
            raise ValueError("note has no elements to update")
        updated = transform(self.content[-1])
        updated = updated.model_copy(update={"bounds": Rect.enclosing(updated.content)})
        return self.model_copy(update={"content": (*self.content[:-1], updated)}).touch()
