"""
FastAPI dependency providers.
"""

from typing import Optional

from slideplay.infra.capture.playwright_renderer import PlaywrightRenderer
from slideplay.infra.config.settings import get_settings
from slideplay.infra.messaging.session_registry import SessionRegistry

_registry: Optional[SessionRegistry] = None
_renderer: Optional[PlaywrightRenderer] = None


def get_session_registry() -> SessionRegistry:
    """Process-wide session registry."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry


def get_renderer() -> PlaywrightRenderer:
    """Process-wide capture renderer; the browser itself launches on first use."""
    global _renderer
    if _renderer is None:
        _renderer = PlaywrightRenderer(get_settings())
    return _renderer


async def shutdown_renderer() -> None:
    global _renderer
    if _renderer is not None:
        await _renderer.dispose()
        _renderer = None
