"""
Generation Errors

Exceptions raised when an activity cannot be generated or exported.
All of them derive from ValueError so callers that already guard
generation with ``except ValueError`` keep working.
"""


class TrackGenerationError(ValueError):
    """Base class for activity generation failures"""


class InvalidConfigError(TrackGenerationError):
    """The activity configuration cannot produce a track"""


class NoRouteError(InvalidConfigError):
    """Fewer than two route points and no distance to build a loop from"""


class ExportNotAllowedError(TrackGenerationError):
    """The export gate refused the download"""
