class SlidePlayError(Exception):
    pass


class CaptureTimeoutError(SlidePlayError):
    def __init__(self, request_id: str, timeout_s: float) -> None:
        super().__init__(
            f"Capture {request_id} timed out after {int(timeout_s * 1000)}ms"
        )
        self.request_id = request_id
        self.timeout_s = timeout_s


class CaptureFailedError(SlidePlayError):
    def __init__(self, request_id: str, reason: str | None = None) -> None:
        super().__init__(f"Capture {request_id} failed: {reason or 'Capture failed'}")
        self.request_id = request_id
        self.reason = reason


class ExportCancelledError(SlidePlayError):
    def __init__(self, total: int) -> None:
        super().__init__(f"Export of {total} slides cancelled at destination selection")
        self.total = total


class InvalidMessageError(SlidePlayError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid message: {reason}")
        self.reason = reason
