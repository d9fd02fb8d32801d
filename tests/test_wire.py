# @TASK P3-T3.2 - Note <-> 백엔드 JSON 변환 테스트
# @TEST tests/test_wire.py

"""Tests for note serialization to and from the backend schema."""

from datetime import UTC, datetime, timedelta

import pytest

from scripto.models import Note, NoteElement, Saved, StrokePoint, StrokeProperties
from scripto.sync_gateway.errors import MalformedResponse
from scripto.sync_gateway.schemas import JsonArray, decode_json_value
from scripto.sync_gateway.wire import decode_note, encode_note

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def drawing_note() -> Note:
    element = NoteElement(
        id="el-1",
        content=[StrokePoint(x=i * 3.0 + 0.123456, y=1.98765, pressure=0.66) for i in range(5)],
        stroke_properties=StrokeProperties(color="black", width=2.0),
    )
    return Note(
        title="Lecture 3",
        tags=["physics", "exam"],
        subject="Mechanics",
        content=[element],
        created_at=T0,
        modified_at=T0 + timedelta(minutes=1, microseconds=500),
    )


def _server_payload(**overrides) -> dict:
    payload = {
        "id": "srv-1",
        "title": "Lecture 3",
        "tags": ["exam", "physics"],
        "subject": "Mechanics",
        "content": [
            {
                "id": "el-1",
                "type": "drawing",
                "content": {"points": [{"x": 0.12, "y": 1.99, "pressure": 0.7}, {"x": 12.12, "y": 1.99, "pressure": 0.7}]},
                "bounds": {"x": 0.12, "y": 1.99, "width": 12.0, "height": 0.0},
                "stroke_properties": {"color": "black", "width": 2.0},
            }
        ],
        "created": "2024-01-01T12:00:00+0000",
        "modified": "2024-01-01T12:05:00+0000",
    }
    payload.update(overrides)
    return payload


class TestEncodeNote:
    """Request body construction."""

    def test_top_level_fields(self, drawing_note):
        body = encode_note(drawing_note)
        assert body["title"] == "Lecture 3"
        assert body["tags"] == ["exam", "physics"]
        assert body["subject"] == "Mechanics"
        assert "id" not in body

    def test_dates_in_wire_format(self, drawing_note):
        body = encode_note(drawing_note)
        assert body["created"] == "2024-01-01T12:00:00+0000"
        assert body["modified"] == "2024-01-01T12:01:00+0000"

    def test_five_sparse_points_all_sent_and_rounded(self, drawing_note):
        """Five points 3.0 apart survive thinning, each quantized."""
        points = encode_note(drawing_note)["content"][0]["content"]["points"]
        assert len(points) == 5
        for p in points:
            assert round(p["x"], 2) == p["x"]
            assert round(p["y"], 2) == p["y"]
            assert round(p["pressure"], 1) == p["pressure"]
        assert points[0] == {"x": 0.12, "y": 1.99, "pressure": 0.7}

    def test_dense_points_thinned(self):
        element = NoteElement(content=[StrokePoint(x=i * 0.1, y=0) for i in range(50)])
        body = encode_note(Note(content=[element]))
        assert len(body["content"][0]["content"]["points"]) == 2

    def test_in_memory_note_untouched(self, drawing_note):
        encode_note(drawing_note)
        assert drawing_note.content[0].content[0].x == 0.123456

    def test_element_shape(self, drawing_note):
        element = encode_note(drawing_note)["content"][0]
        assert element["id"] == "el-1"
        assert element["type"] == "drawing"
        assert set(element["bounds"]) == {"x", "y", "width", "height"}
        assert element["stroke_properties"] == {"color": "black", "width": 2.0}

    def test_absent_stroke_properties_omitted(self):
        element = NoteElement(content=[StrokePoint(x=0, y=0)])
        body = encode_note(Note(content=[element]))
        assert "stroke_properties" not in body["content"][0]

    def test_element_order_preserved(self):
        elements = [NoteElement(id=f"e{i}", content=[StrokePoint(x=i, y=i)]) for i in range(4)]
        body = encode_note(Note(content=elements))
        assert [e["id"] for e in body["content"]] == ["e0", "e1", "e2", "e3"]


class TestDecodeNote:
    """Reply data re-interpreted as a Note."""

    def test_round_trip_fields(self, drawing_note):
        note = decode_note(decode_json_value(_server_payload()), drawing_note)
        assert note.id == drawing_note.id
        assert note.identity == Saved(server_id="srv-1")
        assert note.title == "Lecture 3"
        assert note.tags == frozenset({"physics", "exam"})
        assert note.content[0].id == "el-1"
        assert note.content[0].content[1] == StrokePoint(x=12.12, y=1.99, pressure=0.7)
        assert note.content[0].stroke_properties == StrokeProperties(color="black", width=2.0)

    def test_server_timestamps_used(self, drawing_note):
        note = decode_note(decode_json_value(_server_payload()), drawing_note)
        assert note.created_at == T0
        assert note.modified_at == T0 + timedelta(minutes=5)

    def test_modified_never_moves_backwards(self, drawing_note):
        payload = _server_payload(modified="2024-01-01T12:00:00+0000")
        note = decode_note(decode_json_value(payload), drawing_note)
        assert note.modified_at == drawing_note.modified_at

    def test_created_never_moves_backwards(self):
        """Sub-second precision lost on the wire is not lost locally."""
        stamp = T0.replace(microsecond=500000)
        note = Note(title="t", created_at=stamp, modified_at=stamp)

        saved = decode_note(decode_json_value({**encode_note(note), "id": "srv-1"}), note)

        assert saved.created_at == stamp
        assert saved.modified_at == stamp

    def test_missing_timestamps_fall_back(self, drawing_note):
        payload = _server_payload()
        del payload["created"], payload["modified"]
        note = decode_note(decode_json_value(payload), drawing_note)
        assert note.created_at == drawing_note.created_at

    def test_missing_id_keeps_saved_id(self, drawing_note):
        payload = _server_payload()
        del payload["id"]
        note = decode_note(decode_json_value(payload), drawing_note.with_server_id("srv-9"))
        assert note.server_id == "srv-9"

    def test_missing_id_on_unsaved_note_is_malformed(self, drawing_note):
        payload = _server_payload()
        del payload["id"]
        with pytest.raises(MalformedResponse):
            decode_note(decode_json_value(payload), drawing_note)

    def test_missing_element_id_falls_back_to_position(self, drawing_note):
        payload = _server_payload()
        del payload["content"][0]["id"]
        note = decode_note(decode_json_value(payload), drawing_note)
        assert note.content[0].id == "el-1"

    def test_missing_bounds_derived(self, drawing_note):
        payload = _server_payload()
        del payload["content"][0]["bounds"]
        note = decode_note(decode_json_value(payload), drawing_note)
        assert note.content[0].bounds.width == pytest.approx(12.0)

    def test_non_object_data_is_malformed(self, drawing_note):
        with pytest.raises(MalformedResponse):
            decode_note(JsonArray(()), drawing_note)

    def test_bad_timestamp_is_malformed(self, drawing_note):
        with pytest.raises(MalformedResponse):
            decode_note(decode_json_value(_server_payload(created="yesterday")), drawing_note)

    def test_invalid_shape_is_malformed(self, drawing_note):
        with pytest.raises(MalformedResponse):
            decode_note(decode_json_value(_server_payload(content="nope")), drawing_note)
