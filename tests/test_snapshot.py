"""Tests for snapshot loading and config loading."""

import json

import pytest
import yaml

from chronoglobe.config import Config, load_config
from chronoglobe.models import MediaType, ViewMode
from chronoglobe.snapshot import SnapshotError, load_snapshot, parse_snapshot


@pytest.fixture()
def raw_snapshot():
    return {
        "birthYear": 1985,
        "chapters": [
            {"id": 1, "title": "Childhood", "startDate": "1985-01-01", "endDate": "1997-12-31"},
            {"id": "work", "title": "First Job", "startDate": "2008-09-01"},
            {"id": "bad", "title": ["not", "a", "string"]},
            "garbage",
        ],
        "memories": [
            {
                "id": 7, "timeZoneId": 1, "title": "Beach", "createdAt": "1990-07-01T10:00:00Z",
                "media": [
                    {"type": "IMAGE", "thumbnail_url": "thumb.jpg"},
                    {"type": "video", "storage_url": "clip.mp4"},
                ],
            },
            {"id": "m2", "chapterId": "work", "mediaType": "AUDIO", "textContent": "hello"},
            {"title": "no id"},
        ],
    }


class TestParseSnapshot:
    def test_camel_case_and_ids(self, raw_snapshot):
        snap = parse_snapshot(raw_snapshot)
        assert snap.birth_year == 1985
        assert [c.id for c in snap.chapters] == ["1", "work"]
        assert snap.chapters[0].start_date == "1985-01-01"
        assert snap.skipped == 3

    def test_media_normalised(self, raw_snapshot):
        snap = parse_snapshot(raw_snapshot)
        beach, audio = snap.memories
        assert beach.id == "7"
        assert beach.chapter_id == "1"
        assert beach.thumbnail_url == "thumb.jpg"
        assert beach.media_type == MediaType.IMAGE
        assert beach.media_count == 2
        assert audio.chapter_id == "work"
        assert audio.media_type == MediaType.AUDIO
        assert audio.text_content == "hello"

    def test_timezones_key_accepted(self):
        snap = parse_snapshot({"timeZones": [{"id": "tz", "title": "Abroad"}]})
        assert [c.id for c in snap.chapters] == ["tz"]
        assert snap.birth_year is None


class TestLoadSnapshot:
    def test_yaml(self, tmp_path, raw_snapshot):
        path = tmp_path / "snap.yaml"
        path.write_text(yaml.safe_dump(raw_snapshot))
        snap = load_snapshot(path)
        assert len(snap.chapters) == 2
        assert len(snap.memories) == 2

    def test_json(self, tmp_path, raw_snapshot):
        path = tmp_path / "snap.json"
        path.write_text(json.dumps(raw_snapshot))
        assert len(load_snapshot(path).memories) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotError, match="not found"):
            load_snapshot(tmp_path / "nope.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(SnapshotError, match="mapping"):
            load_snapshot(path)

    def test_unparseable(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SnapshotError, match="Could not parse"):
            load_snapshot(path)


class TestLoadConfig:
    def test_defaults_when_missing(self, tmp_path):
        config = load_config(tmp_path / "config.yaml")
        assert config == Config()
        assert config.globe.max_points == 15
        assert config.hover.globe_hide_delay_ms == 500

    def test_yaml_overrides(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "hover:\n  blob_hide_delay_ms: 100\n"
            "globe:\n  default_view_mode: list\n  stable_positions: true\n"
        )
        config = load_config(path)
        assert config.hover.blob_hide_delay_ms == 100
        assert config.hover.globe_hide_delay_ms == 500
        assert config.globe.default_view_mode == ViewMode.LIST
        assert config.globe.stable_positions is True

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == Config()


class TestHandWrittenSnapshot:
    def test_unquoted_yaml_dates(self, tmp_path):
        path = tmp_path / "snap.yaml"
        path.write_text(
            "birth_year: 1981\n"
            "chapters:\n"
            "  - id: school\n"
            "    title: School Years\n"
            "    startDate: 1987-09-01\n"
            "    endDate: 1999-06-30\n"
            "  - id: band\n"
            "    title: The Band\n"
            "    startDate: 1995\n"
            "memories:\n"
            "  - id: m1\n"
            "    chapterId: school\n"
            "    createdAt: 1990-07-01T10:00:00Z\n"
        )
        snap = load_snapshot(path)
        assert snap.skipped == 0
        school, band = snap.chapters
        assert school.start_date == "1987-09-01"
        assert school.end_date == "1999-06-30"
        assert band.start_date == "1995"
        [memory] = snap.memories
        assert memory.created_dt.year == 1990
        assert memory.created_dt.utcoffset().total_seconds() == 0

    def test_birth_year_as_string(self):
        assert parse_snapshot({"birthYear": "1981"}).birth_year == 1981
        assert parse_snapshot({"birth_year": 1979}).birth_year == 1979

    def test_unusable_birth_year_is_dropped(self):
        assert parse_snapshot({"birthYear": "sometime"}).birth_year is None
        assert parse_snapshot({"birthYear": [1981]}).birth_year is None
        assert parse_snapshot({}).birth_year is None
