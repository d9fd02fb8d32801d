# @TASK P1-T1.3 - 드로잉 입력 -> 노트 요소
# @TEST tests/test_editor.py

"""Stroke recording for a note being edited.

Pointer samples arrive one at a time while a gesture is in progress.  The
first sample of a gesture appends a new drawing element to the note; every
following sample extends that element and recomputes its bounds.
"""

from __future__ import annotations

from scripto.constants import DEFAULT_PRESSURE
from scripto.models import Note, NoteElement, StrokePoint, StrokeProperties


class NoteEditor:
    """Owns the note of one editing session and the stroke in progress.

    Args:
        note: Note to edit; a blank note when omitted.
        stroke_properties: Style applied to new strokes.
    """

    def __init__(
        self,
        note: Note | None = None,
        stroke_properties: StrokeProperties | None = None,
    ) -> None:
        self._note = note or Note.empty()
        self._stroke_properties = stroke_properties or StrokeProperties()
        self._drawing = False

    @property
    def note(self) -> Note:
        return self._note

    @property
    def is_drawing(self) -> bool:
        return self._drawing

    def begin_stroke(self, x: float, y: float, pressure: float = DEFAULT_PRESSURE) -> Note:
        """Start a new stroke at ``(x, y)``, ending any stroke in progress."""
        element = NoteElement.begin_stroke(StrokePoint(x=x, y=y, pressure=pressure), self._stroke_properties)
        self._note = self._note.with_element(element)
        self._drawing = True
        return self._note

    def add_point(self, x: float, y: float, pressure: float = DEFAULT_PRESSURE) -> Note:
        """Extend the current stroke, starting one if none is in progress."""
        if not self._drawing:
            return self.begin_stroke(x, y, pressure)
        point = StrokePoint(x=x, y=y, pressure=pressure)
        self._note = self._note.with_updated_last_element(lambda element: element.with_point(point))
        return self._note

    def end_stroke(self) -> None:
        self._drawing = False

    def replace(self, note: Note) -> None:
        """Swap in *note* (typically the server's copy after a save)."""
        if note.id != self._note.id:
            raise ValueError("cannot replace a note with a different note")
        self._note = note
        self._drawing = False
