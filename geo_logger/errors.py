"""Error kinds raised by the acquirer and the exporter."""

from __future__ import annotations


class GeoLoggerError(Exception):
    """Base class for all errors surfaced to the user."""


class PermissionDenied(GeoLoggerError):
    """The user refused a platform permission.

    Args:
        kind: "location" or "media".
    """

    def __init__(self, kind: str) -> None:
        super().__init__(f"permission denied: {kind}")
        self.kind = kind


class AcquisitionFailed(GeoLoggerError):
    """The sensor or the platform failed to deliver a fix."""


class NothingToExport(GeoLoggerError):
    """Export was requested while the history is empty."""

    def __init__(self) -> None:
        super().__init__("no location data to save")


class ExportError(GeoLoggerError):
    """Writing, registering or filing the export failed."""
