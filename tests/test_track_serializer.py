"""
Tests for Track Serializer

Tests for GPX 1.1 and TCX v2 document structure.
"""

import random

import pytest
from lxml import etree
from synthtrack.generation.models import (
    ActivityConfig,
    ActivityType,
    FileFormat,
    HeartRateConfig,
)
from synthtrack.generation.track_generator import ActivityTrackGenerator
from synthtrack.generation.track_serializer import (
    export_filename,
    GPX_NS,
    GPXTPX_NS,
    TCX_NS,
    TrackSerializer,
)
from synthtrack.generation.waypoint_interpolator import haversine_distance

NS = {"gpx": GPX_NS, "gpxtpx": GPXTPX_NS, "tcx": TCX_NS}

ROUTE = [
    [-0.1000, 51.5000],
    [-0.1000, 51.5050],
    [-0.0930, 51.5050],
]


def _track(**overrides):
    params = dict(
        name="Morning Run",
        date="2026-01-15",
        start_time="08:00",
        avg_pace_sec_per_km=300,
        inconsistency_pct=20,
        route=ROUTE,
    )
    params.update(overrides)
    return ActivityTrackGenerator(rng=random.Random(42)).generate(ActivityConfig(**params))


def _parse(content: str):
    return etree.fromstring(content.encode("utf-8"))


class TestGpx:
    """Tests for GPX output"""

    def test_one_trkpt_per_sample(self):
        """Every sample becomes a trkpt"""
        track = _track()

        root = _parse(TrackSerializer().to_gpx(track))

        assert root.tag == f"{{{GPX_NS}}}gpx"
        assert root.get("version") == "1.1"
        assert len(root.findall(".//gpx:trkpt", NS)) == len(track.samples)

    def test_number_formatting(self):
        """lat/lon with 6 decimals, elevation with 1"""
        root = _parse(TrackSerializer().to_gpx(_track()))

        trkpt = root.find(".//gpx:trkpt", NS)
        assert len(trkpt.get("lat").split(".")[1]) == 6
        assert len(trkpt.get("lon").split(".")[1]) == 6
        assert len(trkpt.find("gpx:ele", NS).text.split(".")[1]) == 1

    def test_timestamps(self):
        """First point at the start time, UTC with milliseconds"""
        root = _parse(TrackSerializer().to_gpx(_track()))

        times = [t.text for t in root.findall(".//gpx:trkpt/gpx:time", NS)]
        assert times[0] == "2026-01-15T08:00:00.000Z"
        assert all(t.endswith("Z") for t in times)
        assert times == sorted(times)

    def test_no_heart_rate_extension_when_disabled(self):
        """No extension or namespace without heart rate"""
        content = TrackSerializer().to_gpx(_track())

        assert "TrackPointExtension" not in content
        assert "gpxtpx" not in content

    def test_heart_rate_extension_when_enabled(self):
        """Every trkpt carries gpxtpx:hr"""
        track = _track(heart_rate=HeartRateConfig(enabled=True, avg_bpm=150))

        root = _parse(TrackSerializer().to_gpx(track))

        hrs = root.findall(".//gpxtpx:TrackPointExtension/gpxtpx:hr", NS)
        assert len(hrs) == len(track.samples)
        assert all(60 <= int(hr.text) <= 200 for hr in hrs)

    def test_name_is_escaped(self):
        """Special characters in the name survive a parse"""
        track = _track(name="Tom & Jerry's <Run>")

        content = TrackSerializer().to_gpx(track)
        root = _parse(content)

        assert "&amp;" in content
        assert "&lt;Run&gt;" in content
        assert root.find("gpx:trk/gpx:name", NS).text == "Tom & Jerry's <Run>"
        assert root.find("gpx:metadata/gpx:name", NS).text == "Tom & Jerry's <Run>"

    def test_control_characters_stripped(self):
        """Characters XML cannot carry are dropped"""
        root = _parse(TrackSerializer().to_gpx(_track(name="Run\x01 One")))

        assert root.find("gpx:trk/gpx:name", NS).text == "Run One"

    def test_track_type(self):
        """Track type follows the sport"""
        root = _parse(TrackSerializer().to_gpx(_track(activity_type=ActivityType.HIKE)))

        assert root.find("gpx:trk/gpx:type", NS).text == "hiking"

    def test_gpx_length_matches_route(self):
        """Haversine length of the trkpts is within 1% of the route"""
        track = _track()
        root = _parse(TrackSerializer().to_gpx(track))

        coords = [
            (float(p.get("lat")), float(p.get("lon")))
            for p in root.findall(".//gpx:trkpt", NS)
        ]
        length = sum(
            haversine_distance(a[0], a[1], b[0], b[1])
            for a, b in zip(coords, coords[1:])
        )
        assert length == pytest.approx(track.track_distance_m, rel=0.01)


class TestTcx:
    """Tests for TCX output"""

    def test_sport_mapping(self):
        """run -> Running, ride -> Biking, hike -> Other"""
        expected = {
            ActivityType.RUN: "Running",
            ActivityType.RIDE: "Biking",
            ActivityType.HIKE: "Other",
        }

        for activity_type, sport in expected.items():
            root = _parse(TrackSerializer().to_tcx(_track(activity_type=activity_type)))
            assert root.find(".//tcx:Activity", NS).get("Sport") == sport

    def test_lap_totals(self):
        """Lap carries the requested time and distance"""
        track = _track(distance_km=2.0, target_time_sec=720)

        root = _parse(TrackSerializer().to_tcx(track))

        lap = root.find(".//tcx:Lap", NS)
        assert lap.get("StartTime") == "2026-01-15T08:00:00.000Z"
        assert float(lap.find("tcx:TotalTimeSeconds", NS).text) == 720
        assert float(lap.find("tcx:DistanceMeters", NS).text) == 2000

    def test_cumulative_distance(self):
        """Trackpoint distance accumulates to the requested distance"""
        track = _track(distance_km=2.0)

        root = _parse(TrackSerializer().to_tcx(track))

        distances = [
            float(d.text) for d in root.findall(".//tcx:Trackpoint/tcx:DistanceMeters", NS)
        ]
        assert len(distances) == len(track.samples)
        assert distances == sorted(distances)
        assert distances[-1] == pytest.approx(2000, abs=0.01)

    def test_heart_rate_only_when_enabled(self):
        """HeartRateBpm elements follow the heart rate switch"""
        without = TrackSerializer().to_tcx(_track())
        with_hr = TrackSerializer().to_tcx(
            _track(heart_rate=HeartRateConfig(enabled=True, avg_bpm=140))
        )

        assert "HeartRateBpm" not in without
        assert "HeartRateBpm" in with_hr

    def test_notes_carry_name_and_description(self):
        """Notes hold the activity name and description"""
        root = _parse(
            TrackSerializer().to_tcx(_track(name="Tempo", description="Felt good"))
        )

        assert root.find(".//tcx:Notes", NS).text == "Tempo\nFelt good"


class TestRender:
    """Tests for the downloadable file wrapper"""

    def test_render_gpx(self):
        """GPX media type and file name"""
        exported = TrackSerializer().render(_track(), FileFormat.GPX)

        assert exported.filename == "Morning_Run.gpx"
        assert exported.media_type == "application/gpx+xml"
        assert exported.content.startswith("<?xml")

    def test_render_tcx(self):
        """TCX media type and file name"""
        exported = TrackSerializer().render(_track(), FileFormat.TCX)

        assert exported.filename == "Morning_Run.tcx"
        assert exported.media_type == "application/vnd.garmin.tcx+xml"
        assert exported.to_dict()["file_format"] == "tcx"

    def test_export_filename(self):
        """Whitespace becomes underscores, empty names get a default"""
        assert export_filename("Sunday  Long Ride", FileFormat.GPX) == "Sunday_Long_Ride.gpx"
        assert export_filename("   ", FileFormat.TCX) == "activity.tcx"
