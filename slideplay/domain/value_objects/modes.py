"""
Interaction mode value objects.
"""

from enum import Enum


class ViewerMode(str, Enum):
    PRESENTATION = "presentation"
    LIVE_EDIT = "live-edit"
    ANIMATION_BUILDER = "animation-builder"


class FullscreenMode(str, Enum):
    NONE = "none"
    VIEW = "view"
    EDIT = "edit"


class ModeTransition(str, Enum):
    """Requests accepted by the mode state machine."""

    ENTER_LIVE_EDIT = "enter-live-edit"
    EXIT_LIVE_EDIT = "exit-live-edit"
    ENTER_BUILDER = "enter-builder"
    EXIT_BUILDER = "exit-builder"
    ENTER_FULLSCREEN_VIEW = "enter-fullscreen-view"
    ENTER_FULLSCREEN_EDIT = "enter-fullscreen-edit"
    EXIT_FULLSCREEN = "exit-fullscreen"


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class EditState(str, Enum):
    IDLE = "idle"
    ACTIVATED = "activated"
    DIRTY = "dirty"
    SAVING = "saving"
    SAVED = "saved"
