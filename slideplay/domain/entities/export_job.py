"""
Capture request and export job entities.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from slideplay.domain.value_objects.export import ExportFormat, ExportJobStatus
from slideplay.domain.value_objects.quality import CaptureOptions, QualityPreset


@dataclass
class CaptureRequest:
    request_id: str
    markup: str
    options: Optional[CaptureOptions] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ExportProgress:
    current: int
    total: int
    format: ExportFormat
    preset: Optional[QualityPreset] = None


@dataclass
class ExportJob:
    format: ExportFormat
    total: int
    preset: Optional[QualityPreset] = None
    status: ExportJobStatus = ExportJobStatus.RUNNING
    requests: List[CaptureRequest] = field(default_factory=list)
    # (slide number, data uri) in capture order
    successes: List[tuple[int, str]] = field(default_factory=list)
    error_count: int = 0

    def record_success(self, slide_number: int, data_uri: str) -> None:
        self._ensure_running()
        self.successes.append((slide_number, data_uri))

    def record_failure(self) -> None:
        self._ensure_running()
        self.error_count += 1

    def abort(self) -> None:
        self._ensure_running()
        self.status = ExportJobStatus.ABORTED

    def complete(self) -> ExportJobStatus:
        """Business rule: any failed item makes the job complete with errors."""
        self._ensure_running()
        self.status = (
            ExportJobStatus.COMPLETED_WITH_ERRORS
            if self.error_count
            else ExportJobStatus.COMPLETED_CLEAN
        )
        return self.status

    @property
    def success_count(self) -> int:
        return len(self.successes)

    def summary(self) -> str:
        return (
            f"exported {self.success_count} of {self.total}"
            + (f" ({self.error_count} failed)" if self.error_count else "")
        )

    def _ensure_running(self) -> None:
        if self.status.is_terminal:
            raise ValueError(f"Export job already {self.status.value}")
