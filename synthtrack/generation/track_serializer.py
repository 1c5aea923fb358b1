"""
Track Serializer

Renders generated tracks as GPX 1.1 or TCX v2 documents.

Documents are built as lxml element trees and serialized in one pass, so
activity names containing XML special characters are escaped correctly.
"""

import re
from typing import Optional

from lxml import etree

from .models import (
    ActivityType,
    ExportedFile,
    FileFormat,
    GeneratedTrack,
    format_timestamp,
)

GPX_NS = "http://www.topografix.com/GPX/1/1"
GPXTPX_NS = "http://www.garmin.com/xmlschemas/TrackPointExtension/v1"
TCX_NS = "http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"

CREATOR = "SynthTrack"

MEDIA_TYPES = {
    FileFormat.GPX: "application/gpx+xml",
    FileFormat.TCX: "application/vnd.garmin.tcx+xml",
}

TCX_SPORTS = {
    ActivityType.RUN: "Running",
    ActivityType.RIDE: "Biking",
    ActivityType.HIKE: "Other",
}

GPX_TRACK_TYPES = {
    ActivityType.RUN: "running",
    ActivityType.RIDE: "cycling",
    ActivityType.HIKE: "hiking",
}

# Characters that XML 1.0 does not allow in text, even escaped
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def export_filename(name: str, file_format: FileFormat) -> str:
    """
    Download file name for an activity.

    Whitespace runs become underscores: "Morning Run" -> "Morning_Run.gpx"
    """
    stem = re.sub(r"\s+", "_", name.strip()) or "activity"
    return f"{stem}.{file_format.value}"


def _xml_text(value: Optional[str]) -> str:
    return _INVALID_XML_CHARS.sub("", value or "")


def _sub(parent, tag: str, text: Optional[str] = None, **attrib):
    element = etree.SubElement(parent, tag, **attrib)
    if text is not None:
        element.text = text
    return element


class TrackSerializer:
    """Renders a GeneratedTrack as GPX or TCX text"""

    def render(self, track: GeneratedTrack, file_format: FileFormat) -> ExportedFile:
        """
        Render a track as a downloadable file.

        Args:
            track: Generated track
            file_format: FileFormat.GPX or FileFormat.TCX

        Returns:
            ExportedFile with name, content and media type
        """
        if file_format == FileFormat.GPX:
            content = self.to_gpx(track)
        else:
            content = self.to_tcx(track)

        return ExportedFile(
            filename=export_filename(track.config.name, file_format),
            content=content,
            media_type=MEDIA_TYPES[file_format],
            file_format=file_format,
        )

    def to_gpx(self, track: GeneratedTrack) -> str:
        """Render a track as a GPX 1.1 document"""
        config = track.config
        hr_enabled = config.heart_rate.enabled

        nsmap = {None: GPX_NS}
        if hr_enabled:
            nsmap["gpxtpx"] = GPXTPX_NS

        gpx = etree.Element(
            f"{{{GPX_NS}}}gpx", nsmap=nsmap, version="1.1", creator=CREATOR
        )

        name = _xml_text(config.name)
        metadata = _sub(gpx, f"{{{GPX_NS}}}metadata")
        _sub(metadata, f"{{{GPX_NS}}}name", name)
        if config.description:
            _sub(metadata, f"{{{GPX_NS}}}desc", _xml_text(config.description))
        if track.start_time is not None:
            _sub(metadata, f"{{{GPX_NS}}}time", format_timestamp(track.start_time))

        trk = _sub(gpx, f"{{{GPX_NS}}}trk")
        _sub(trk, f"{{{GPX_NS}}}name", name)
        _sub(trk, f"{{{GPX_NS}}}type", GPX_TRACK_TYPES[config.activity_type])
        trkseg = _sub(trk, f"{{{GPX_NS}}}trkseg")

        for sample in track.samples:
            trkpt = _sub(
                trkseg,
                f"{{{GPX_NS}}}trkpt",
                lat=f"{sample.lat:.6f}",
                lon=f"{sample.lon:.6f}",
            )
            _sub(trkpt, f"{{{GPX_NS}}}ele", f"{sample.elevation_m:.1f}")
            _sub(trkpt, f"{{{GPX_NS}}}time", sample.timestamp_iso)

            if hr_enabled and sample.heart_rate_bpm is not None:
                extensions = _sub(trkpt, f"{{{GPX_NS}}}extensions")
                tpx = _sub(extensions, f"{{{GPXTPX_NS}}}TrackPointExtension")
                _sub(tpx, f"{{{GPXTPX_NS}}}hr", str(sample.heart_rate_bpm))

        return self._serialize(gpx)

    def to_tcx(self, track: GeneratedTrack) -> str:
        """Render a track as a TCX v2 document"""
        config = track.config
        hr_enabled = config.heart_rate.enabled
        start = format_timestamp(track.start_time) if track.start_time else ""
        total_distance_m = track.distance_km * 1000

        root = etree.Element(f"{{{TCX_NS}}}TrainingCenterDatabase", nsmap={None: TCX_NS})
        activities = _sub(root, f"{{{TCX_NS}}}Activities")
        activity = _sub(
            activities,
            f"{{{TCX_NS}}}Activity",
            Sport=TCX_SPORTS[config.activity_type],
        )
        _sub(activity, f"{{{TCX_NS}}}Id", start)

        lap = _sub(activity, f"{{{TCX_NS}}}Lap", StartTime=start)
        _sub(lap, f"{{{TCX_NS}}}TotalTimeSeconds", f"{track.target_time_sec:.1f}")
        _sub(lap, f"{{{TCX_NS}}}DistanceMeters", f"{total_distance_m:.1f}")
        _sub(lap, f"{{{TCX_NS}}}Calories", "0")
        _sub(lap, f"{{{TCX_NS}}}Intensity", "Active")
        _sub(lap, f"{{{TCX_NS}}}TriggerMethod", "Manual")
        track_el = _sub(lap, f"{{{TCX_NS}}}Track")

        # Even share of the requested distance per point, accumulated
        step_m = total_distance_m / len(track.samples) if track.samples else 0.0
        cumulative = 0.0

        for sample in track.samples:
            cumulative += step_m
            trackpoint = _sub(track_el, f"{{{TCX_NS}}}Trackpoint")
            _sub(trackpoint, f"{{{TCX_NS}}}Time", sample.timestamp_iso)
            position = _sub(trackpoint, f"{{{TCX_NS}}}Position")
            _sub(position, f"{{{TCX_NS}}}LatitudeDegrees", f"{sample.lat:.6f}")
            _sub(position, f"{{{TCX_NS}}}LongitudeDegrees", f"{sample.lon:.6f}")
            _sub(trackpoint, f"{{{TCX_NS}}}AltitudeMeters", f"{sample.elevation_m:.1f}")
            _sub(trackpoint, f"{{{TCX_NS}}}DistanceMeters", f"{cumulative:.2f}")

            if hr_enabled and sample.heart_rate_bpm is not None:
                hr = _sub(trackpoint, f"{{{TCX_NS}}}HeartRateBpm")
                _sub(hr, f"{{{TCX_NS}}}Value", str(sample.heart_rate_bpm))

        notes = _xml_text(config.name)
        if config.description:
            notes = f"{notes}\n{_xml_text(config.description)}"
        _sub(activity, f"{{{TCX_NS}}}Notes", notes)

        return self._serialize(root)

    @staticmethod
    def _serialize(root) -> str:
        return etree.tostring(
            root, pretty_print=True, xml_declaration=True, encoding="UTF-8"
        ).decode("utf-8")
