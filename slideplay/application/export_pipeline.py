"""
Export pipeline: single PNG, folder of PNGs, and multi-page PDF.

Captures run strictly one after another. A failed capture is logged and
skipped; artifacts are assembled from successes only.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from slideplay.api.schemas.messages import (
    BatchCompleteMessage,
    ExportCancelledMessage,
    ExportFileMessage,
    ExportFolderReadyMessage,
)
from slideplay.application.capture import CaptureClient
from slideplay.application.mode_machine import ModeMachine
from slideplay.application.ports import HostChannelPort
from slideplay.domain.entities.export_job import ExportJob, ExportProgress
from slideplay.domain.entities.slide import Deck, Slide
from slideplay.domain.exceptions import CaptureFailedError, ExportCancelledError, SlidePlayError
from slideplay.domain.value_objects.export import ExportFormat
from slideplay.domain.value_objects.modes import ViewerMode
from slideplay.domain.value_objects.quality import (
    CaptureOptions,
    QualityPreset,
    resolve_preset,
)
from slideplay.infra.config.logging_config import get_logger
from slideplay.infra.export.pdf_assembler import PdfAssembler, load_image

BATCH_INIT_MARKER = "__batch_init__"


class ExportPipeline:
    def __init__(
        self,
        channel: HostChannelPort,
        capture: CaptureClient,
        modes: ModeMachine,
        deck: Deck,
        assembler: Optional[PdfAssembler] = None,
    ) -> None:
        self._channel = channel
        self._capture = capture
        self._modes = modes
        self._deck = deck
        self._assembler = assembler or PdfAssembler()
        self._busy = False
        self._progress: Optional[ExportProgress] = None
        self._log = get_logger("application.export")

    @property
    def is_exporting(self) -> bool:
        return self._busy

    @property
    def progress(self) -> Optional[ExportProgress]:
        return self._progress

    def _can_export(self, action: str) -> bool:
        if self._modes.mode != ViewerMode.PRESENTATION:
            self._log.info("export.rejected", action=action, reason="mode", mode=self._modes.mode.value)
            return False
        if self._busy:
            self._log.info("export.rejected", action=action, reason="busy")
            return False
        if len(self._deck) == 0:
            self._log.info("export.rejected", action=action, reason="empty_deck")
            return False
        return True

    async def _capture_into(
        self,
        job: ExportJob,
        slide: Slide,
        options: Optional[CaptureOptions],
        decode: bool = False,
    ) -> Optional[str]:
        request = self._capture.new_request(slide.markup, options)
        job.requests.append(request)
        try:
            data_uri = await self._capture.capture(request)
            if decode:
                try:
                    load_image(data_uri)
                except ValueError as e:
                    raise CaptureFailedError(request.request_id, str(e)) from e
        except SlidePlayError as e:
            job.record_failure()
            self._log.warning(
                "export.capture.skipped",
                slide_number=slide.number,
                request_id=request.request_id,
                error=str(e),
            )
            return None
        job.record_success(slide.number, data_uri)
        return data_uri

    # ---------- single slide ----------
    async def export_current_png(self, slide_number: int) -> Optional[ExportJob]:
        if not self._can_export("current-png"):
            return None
        slide = self._deck.get(slide_number)
        if slide is None:
            return None

        job = ExportJob(format=ExportFormat.PNG, total=1)
        self._busy = True
        try:
            self._progress = ExportProgress(current=1, total=1, format=ExportFormat.PNG)
            data_uri = await self._capture_into(job, slide, None)
            if data_uri is not None:
                await self._channel.send(
                    ExportFileMessage(
                        format=ExportFormat.PNG,
                        data=data_uri,
                        file_name=f"slide-{slide_number}.png",
                        deck_id=self._deck.deck_id,
                    )
                )
            job.complete()
        finally:
            self._progress = None
            self._busy = False

        self._log.info("export.png.done", status=job.status.value, summary=job.summary())
        return job

    # ---------- batch PNG ----------
    async def export_all_png(self) -> Optional[ExportJob]:
        if not self._can_export("all-png"):
            return None

        slides = list(self._deck.slides)
        job = ExportJob(format=ExportFormat.PNG, total=len(slides))
        self._busy = True
        try:
            try:
                await self._await_destination(job.total)
            except ExportCancelledError as e:
                job.abort()
                self._log.info("export.batch.cancelled", total=e.total)
                return job

            for index, slide in enumerate(slides, start=1):
                self._progress = ExportProgress(
                    current=index, total=job.total, format=ExportFormat.PNG
                )
                data_uri = await self._capture_into(job, slide, None)
                if data_uri is None:
                    continue
                await self._channel.send(
                    ExportFileMessage(
                        format=ExportFormat.PNG,
                        data=data_uri,
                        file_name=f"slide-{index}.png",
                    )
                )

            job.complete()
            await self._channel.send(
                BatchCompleteMessage(total=job.total, error_count=job.error_count)
            )
        finally:
            self._progress = None
            self._busy = False

        self._log_batch_result(job)
        return job

    async def _await_destination(self, total: int) -> None:
        """Ask the host for a destination folder. Raises ExportCancelledError."""
        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

        def on_message(message: Any) -> None:
            if future.done():
                return
            if isinstance(message, ExportFolderReadyMessage):
                future.set_result(True)
            elif isinstance(message, ExportCancelledMessage):
                future.set_result(False)

        unsubscribe = self._channel.subscribe(on_message)
        try:
            await self._channel.send(
                ExportFileMessage(
                    format=ExportFormat.PNG,
                    data=BATCH_INIT_MARKER,
                    file_name=f"batch-{total}",
                )
            )
            ready = await future
        finally:
            unsubscribe()

        if not ready:
            raise ExportCancelledError(total)

    # ---------- PDF ----------
    async def export_pdf(self, preset: Optional[QualityPreset] = None) -> Optional[ExportJob]:
        if not self._can_export("pdf"):
            return None

        preset = QualityPreset(preset) if preset is not None else None
        options = resolve_preset(preset)
        slides = list(self._deck.slides)
        job = ExportJob(format=ExportFormat.PDF, total=len(slides), preset=preset)
        self._busy = True
        try:
            for index, slide in enumerate(slides, start=1):
                self._progress = ExportProgress(
                    current=index, total=job.total, format=ExportFormat.PDF, preset=preset
                )
                await self._capture_into(job, slide, options, decode=True)

            pdf_uri = self._assemble(job) if job.successes else None
            if pdf_uri is not None:
                await self._channel.send(
                    ExportFileMessage(
                        format=ExportFormat.PDF,
                        data=pdf_uri,
                        file_name=f"{self._deck.name or 'deck'}.pdf",
                        deck_id=self._deck.deck_id,
                    )
                )
            elif not job.successes:
                self._log.warning("export.pdf.empty", total=job.total)

            job.complete()
            await self._channel.send(
                BatchCompleteMessage(total=job.total, error_count=job.error_count)
            )
        finally:
            self._progress = None
            self._busy = False

        self._log_batch_result(job)
        return job

    def _assemble(self, job: ExportJob) -> Optional[str]:
        try:
            return self._assembler.assemble_data_uri(
                [data_uri for _, data_uri in job.successes]
            )
        except ValueError as e:
            self._log.error("export.pdf.assembly_failed", pages=len(job.successes), error=str(e))
            return None

    def _log_batch_result(self, job: ExportJob) -> None:
        if job.error_count:
            self._log.warning(
                "export.batch.partial",
                format=job.format.value,
                summary=job.summary(),
                error_count=job.error_count,
            )
        else:
            self._log.info("export.batch.done", format=job.format.value, summary=job.summary())

