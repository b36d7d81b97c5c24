"""
Export value objects.
"""

from enum import Enum


class ExportFormat(str, Enum):
    PNG = "png"
    PDF = "pdf"


class ExportJobStatus(str, Enum):
    RUNNING = "running"
    COMPLETED_CLEAN = "completed_clean"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self != ExportJobStatus.RUNNING
