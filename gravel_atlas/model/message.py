"""Message - User-facing feedback from the draw mode.

Two kinds:
- Message: persistent status shown in the draw panel until replaced
- ToastMessage: transient notification about one action (snap fallback,
  save result)

The draw controller keeps the latest of each in DrawContext.messages; the
UI layer decides how to show them. Every message is also logged.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class MessageLevel(Enum):
    """Display level for UI messages."""

    INFO = "info"  # Blue - context/status
    WARNING = "warning"  # Yellow - action instructions
    ERROR = "error"  # Red - failures the user must act on


_LOG_LEVELS = {
    MessageLevel.INFO: logging.INFO,
    MessageLevel.WARNING: logging.WARNING,
    MessageLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Message(ABC):
    """Abstract base class for persistent panel messages."""

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message text."""
        raise NotImplementedError

    @property
    @abstractmethod
    def level(self) -> MessageLevel:
        """Display level."""
        raise NotImplementedError

    def log(self) -> None:
        logger.log(_LOG_LEVELS[self.level], f"[MESSAGE] {self.message}")

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ToastMessage(Message):
    """Abstract base class for transient popup notifications."""

    @property
    @abstractmethod
    def icon(self) -> str:
        """Icon to show in the toast."""
        raise NotImplementedError

    def log(self) -> None:
        logger.log(_LOG_LEVELS[self.level], f"[TOAST] {self.icon} {self.message}")


# =============================================================================
# DRAW PANEL - Status messages
# =============================================================================


@dataclass(frozen=True)
class DrawingStatusMessage(Message):
    """Progress of the current drawing."""

    point_count: int
    distance_km: float
    pending_samples: int = 0

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        if self.point_count == 0:
            return "Click on the map to start your route."
        text = f"{self.point_count} points, {self.distance_km:.2f} km"
        if self.pending_samples:
            text += f" (loading elevation for {self.pending_samples})"
        return text


@dataclass(frozen=True)
class TooFewPointsMessage(Message):
    """Finish was requested with fewer than the required points."""

    point_count: int
    required: int

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.WARNING

    @property
    def message(self) -> str:
        return f"A segment needs at least {self.required} points (you placed {self.point_count}). Drawing cleared."


# =============================================================================
# TOASTS
# =============================================================================


@dataclass(frozen=True)
class SnapFallbackMessage(ToastMessage):
    """Snap-to-road found no road; the raw click was used."""

    reason: str

    @property
    def icon(self) -> str:
        return "📍"

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        return f"Not snapped to road: {self.reason}"


@dataclass(frozen=True)
class SegmentSavedMessage(ToastMessage):
    """Segment was stored."""

    title: str
    distance_km: float

    @property
    def icon(self) -> str:
        return "✅"

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        return f"Saved '{self.title}' ({self.distance_km:.1f} km)"


@dataclass(frozen=True)
class SaveFailedMessage(ToastMessage):
    """Storing the segment failed; the user has to save again."""

    error: str

    @property
    def icon(self) -> str:
        return "⚠️"

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.ERROR

    @property
    def message(self) -> str:
        return f"Save failed: {self.error}"
