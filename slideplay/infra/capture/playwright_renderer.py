"""
Headless Chromium renderer for pixel-accurate slide capture.

Runs on the host side of the channel: it turns ``capture-request`` messages
into ``capture-result`` / ``capture-error`` replies.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Union

from playwright.async_api import Browser, Playwright, async_playwright

from slideplay.api.schemas.messages import (
    CaptureErrorMessage,
    CaptureRequestMessage,
    CaptureResultMessage,
)
from slideplay.domain.value_objects.quality import CaptureOptions, ImageFormat
from slideplay.infra.config.logging_config import get_logger
from slideplay.infra.config.settings import Settings, get_settings
from slideplay.infra.export.pdf_assembler import encode_data_uri
from slideplay.infra.timers import CancellableTimer

log = get_logger("infra.renderer")

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-gpu",
    "--disable-dev-shm-usage",
    "--font-render-hinting=none",
]
SETTLE_MS = 200


class PlaywrightRenderer:
    """Lazily launched browser, closed again after a period of inactivity."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._idle_timer: Optional[CancellableTimer] = None
        self._launch_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def _get_browser(self) -> Browser:
        async with self._launch_lock:
            if not self.is_running:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=True, args=LAUNCH_ARGS
                )
                log.info("renderer.browser.launched")
            self._reset_idle_timer()
            return self._browser

    def _reset_idle_timer(self) -> None:
        if self._idle_timer is not None:
            self._idle_timer.cancel()
        self._idle_timer = CancellableTimer(
            self._settings.renderer_idle_timeout_s, self.dispose, name="renderer.idle"
        ).start()

    async def capture(self, markup: str, options: Optional[CaptureOptions] = None) -> bytes:
        image_format = options.format if options else ImageFormat.PNG
        width, height = self._settings.slide_width, self._settings.slide_height

        browser = await self._get_browser()
        page = await browser.new_page(viewport={"width": width, "height": height})
        try:
            await page.set_content(markup, wait_until="networkidle")
            await page.evaluate("() => document.fonts.ready")
            await page.wait_for_timeout(SETTLE_MS)

            screenshot_kwargs = {"type": image_format.value}
            if image_format == ImageFormat.JPEG and options and options.quality is not None:
                screenshot_kwargs["quality"] = options.quality

            slide = await page.query_selector(".slide")
            if slide is not None:
                return await slide.screenshot(**screenshot_kwargs)
            return await page.screenshot(
                clip={"x": 0, "y": 0, "width": width, "height": height},
                **screenshot_kwargs,
            )
        finally:
            await page.close()

    async def dispose(self) -> None:
        if self._idle_timer is not None:
            self._idle_timer.cancel()
            self._idle_timer = None
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                log.debug("renderer.browser.close_failed", error=str(e))
            self._browser = None
            log.info("renderer.browser.disposed")
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None


async def serve_capture_request(
    renderer: PlaywrightRenderer, request: CaptureRequestMessage
) -> Union[CaptureResultMessage, CaptureErrorMessage]:
    """Answer one capture request. Renderer failures become ``capture-error``."""
    mime_type = request.options.mime_type if request.options else "image/png"
    try:
        image = await renderer.capture(request.markup, request.options)
    except Exception as e:
        log.exception("renderer.capture.failed", request_id=request.request_id)
        return CaptureErrorMessage(request_id=request.request_id, error=str(e) or "Capture failed")
    return CaptureResultMessage(
        request_id=request.request_id, data_uri=encode_data_uri(mime_type, image)
    )
