"""
Application ports - abstract interfaces for external dependencies.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Protocol

from slideplay.infra.surface.surface import SlideSurface

Listener = Callable[[Any], None]


class HostChannelPort(ABC):
    """Asynchronous message channel to the host shell."""

    @abstractmethod
    async def send(self, message: Any) -> None:
        """Send one outbound message to the host."""
        pass

    @abstractmethod
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register an inbound listener. Returns a function that removes it."""
        pass

    @abstractmethod
    def deliver(self, message: Any) -> None:
        """Hand one inbound message to every current subscriber."""
        pass


class SurfaceResolver(Protocol):
    """Returns the currently attached surface, or None."""

    def __call__(self) -> Optional[SlideSurface]: ...
