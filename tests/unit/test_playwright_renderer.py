"""Tests for the headless capture renderer with Playwright mocked out."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from slideplay.api.schemas.messages import (
    CaptureErrorMessage,
    CaptureRequestMessage,
    CaptureResultMessage,
)
from slideplay.domain.value_objects.quality import CaptureOptions, ImageFormat
from slideplay.infra.capture import playwright_renderer
from slideplay.infra.capture.playwright_renderer import (
    PlaywrightRenderer,
    serve_capture_request,
)
from slideplay.infra.export.pdf_assembler import decode_data_uri


class TestPlaywrightRenderer:
    """Test cases for PlaywrightRenderer."""

    @pytest.fixture
    def element(self):
        element = MagicMock()
        element.screenshot = AsyncMock(return_value=b"slide-bytes")
        return element

    @pytest.fixture
    def page(self, element):
        page = MagicMock()
        page.set_content = AsyncMock()
        page.evaluate = AsyncMock()
        page.wait_for_timeout = AsyncMock()
        page.query_selector = AsyncMock(return_value=element)
        page.screenshot = AsyncMock(return_value=b"page-bytes")
        page.close = AsyncMock()
        return page

    @pytest.fixture
    def browser(self, page):
        browser = MagicMock()
        browser.is_connected.return_value = True
        browser.new_page = AsyncMock(return_value=page)
        browser.close = AsyncMock()
        return browser

    @pytest.fixture
    def playwright(self, browser, monkeypatch):
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(return_value=browser)
        playwright.stop = AsyncMock()
        starter = MagicMock()
        starter.start = AsyncMock(return_value=playwright)
        monkeypatch.setattr(playwright_renderer, "async_playwright", lambda: starter)
        return playwright

    @pytest.fixture
    def renderer(self, settings, playwright):
        return PlaywrightRenderer(settings)

    @pytest.mark.asyncio
    async def test_captures_slide_element(self, renderer, browser, page, element):
        image = await renderer.capture("<div class='slide'></div>")

        assert image == b"slide-bytes"
        browser.new_page.assert_awaited_once_with(viewport={"width": 1920, "height": 1080})
        page.set_content.assert_awaited_once_with(
            "<div class='slide'></div>", wait_until="networkidle"
        )
        element.screenshot.assert_awaited_once_with(type="png")
        page.close.assert_awaited_once()
        await renderer.dispose()

    @pytest.mark.asyncio
    async def test_jpeg_quality_is_passed(self, renderer, element):
        await renderer.capture("<p/>", CaptureOptions(format=ImageFormat.JPEG, quality=65))
        element.screenshot.assert_awaited_once_with(type="jpeg", quality=65)
        await renderer.dispose()

    @pytest.mark.asyncio
    async def test_falls_back_to_clipped_page(self, renderer, page):
        page.query_selector.return_value = None

        image = await renderer.capture("<p/>")

        assert image == b"page-bytes"
        page.screenshot.assert_awaited_once_with(
            clip={"x": 0, "y": 0, "width": 1920, "height": 1080}, type="png"
        )
        await renderer.dispose()

    @pytest.mark.asyncio
    async def test_browser_is_reused(self, renderer, playwright):
        await renderer.capture("<p/>")
        await renderer.capture("<p/>")
        assert playwright.chromium.launch.await_count == 1
        await renderer.dispose()

    @pytest.mark.asyncio
    async def test_page_closed_on_failure(self, renderer, page):
        page.set_content.side_effect = RuntimeError("navigation failed")
        with pytest.raises(RuntimeError):
            await renderer.capture("<p/>")
        page.close.assert_awaited_once()
        await renderer.dispose()

    @pytest.mark.asyncio
    async def test_idle_browser_is_disposed(self, renderer, browser, playwright):
        await renderer.capture("<p/>")
        assert renderer.is_running

        await asyncio.sleep(0.1)

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert not renderer.is_running


class TestServeCaptureRequest:
    """Test cases for answering capture requests."""

    @pytest.mark.asyncio
    async def test_success_becomes_result(self):
        renderer = MagicMock()
        renderer.capture = AsyncMock(return_value=b"\xff\xd8jpeg")
        request = CaptureRequestMessage(
            request_id="r1",
            markup="<p/>",
            options=CaptureOptions(format=ImageFormat.JPEG, quality=82),
        )

        reply = await serve_capture_request(renderer, request)

        assert isinstance(reply, CaptureResultMessage)
        assert reply.request_id == "r1"
        mime, data = decode_data_uri(reply.data_uri)
        assert mime == "image/jpeg"
        assert data == b"\xff\xd8jpeg"

    @pytest.mark.asyncio
    async def test_failure_becomes_error(self):
        renderer = MagicMock()
        renderer.capture = AsyncMock(side_effect=TimeoutError("page load timed out"))

        reply = await serve_capture_request(
            renderer, CaptureRequestMessage(request_id="r2", markup="<p/>")
        )

        assert isinstance(reply, CaptureErrorMessage)
        assert reply.request_id == "r2"
        assert "timed out" in reply.error
