"""UI state holder and the two user actions that update it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from geo_logger.acquire import acquire_position
from geo_logger.config import AppConfig
from geo_logger.errors import AcquisitionFailed, ExportError, NothingToExport, PermissionDenied
from geo_logger.export import ExportResult, export_history
from geo_logger.history import SessionHistory
from geo_logger.models import PositionReading
from geo_logger.platform import Platform
from geo_logger.timeutils import Clock, utc_now

logger = logging.getLogger(__name__)

LOCATION_DENIED_MESSAGE = "Permission to access location was denied"


@dataclass(frozen=True, slots=True)
class Alert:
    """A modal message: title plus text."""

    title: str
    message: str

    @property
    def is_error(self) -> bool:
        return self.title != "Success"


@dataclass
class AppState:
    """Everything the presentation layer renders.

    ``error_message`` is only written by location requests: a failure overwrites
    it and a success clears it. Exports report through ``last_alert`` instead.
    """

    current_position: PositionReading | None = None
    error_message: str | None = None
    history: SessionHistory = field(default_factory=SessionHistory)
    locating: bool = False
    saving: bool = False
    last_alert: Alert | None = None
    last_export: ExportResult | None = None


class SessionController:
    """Runs the "get location" and "save to file" actions against one state.

    A second trigger of an action while the first is still pending is rejected;
    the two actions may run at the same time.
    """

    def __init__(
        self,
        state: AppState,
        platform: Platform,
        config: AppConfig | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.state = state
        self.platform = platform
        self.config = config or AppConfig()
        self._clock = clock

    @property
    def can_save(self) -> bool:
        return not self.state.history.is_empty() and not self.state.saving

    async def get_location(self) -> bool:
        """Acquire one fix. Returns True when a reading was appended."""

        st = self.state
        if st.locating:
            logger.info("location request already in flight; ignored")
            return False
        st.locating = True
        try:
            entry = await acquire_position(
                self.platform.permissions,
                self.platform.sensor,
                accuracy=self.config.accuracy,
                clock=self._clock,
                timeout_seconds=self.config.acquire_timeout_seconds,
            )
        except PermissionDenied:
            st.error_message = LOCATION_DENIED_MESSAGE
            return False
        except AcquisitionFailed as exc:
            logger.error("Error getting location: %s", exc)
            st.error_message = f"Could not get location: {exc}"
            return False
        finally:
            st.locating = False

        st.current_position = entry.reading
        st.error_message = None
        st.history.append(entry)
        return True

    async def save_locations(self) -> Alert | None:
        """Export the whole history. Returns the alert to show, None if rejected."""

        st = self.state
        if st.saving:
            logger.info("export already in flight; ignored")
            return None
        st.saving = True
        try:
            result = await export_history(
                st.history,
                self.platform.permissions,
                self.platform.files,
                self.platform.media,
                album_name=self.config.album_name,
                clock=self._clock,
                cleanup_on_failure=self.config.cleanup_on_failure,
            )
        except NothingToExport:
            alert = Alert("Error", "No location data to save")
        except PermissionDenied:
            alert = Alert("Permission Denied", "Permission to access media library is required!")
        except ExportError as exc:
            logger.error("Error saving location data: %s", exc)
            alert = Alert("Error", f"Failed to save location data: {exc}")
        else:
            st.last_export = result
            alert = Alert("Success", "File saved to Downloads folder!")
        finally:
            st.saving = False

        st.last_alert = alert
        return alert
