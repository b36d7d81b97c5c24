"""
Queue-backed host channel.
"""

import asyncio
from typing import Any, Callable, List

from slideplay.application.ports import HostChannelPort, Listener
from slideplay.infra.config.logging_config import get_logger


class QueueHostChannel(HostChannelPort):
    """Outbound messages go to a queue drained by the transport; inbound
    messages are fanned out to subscribers in registration order."""

    def __init__(self) -> None:
        self.outbox: asyncio.Queue[Any] = asyncio.Queue()
        self.sent: List[Any] = []
        self._listeners: List[Listener] = []
        self._log = get_logger("infra.host_channel")

    async def send(self, message: Any) -> None:
        self.sent.append(message)
        await self.outbox.put(message)
        self._log.debug("host.send", type=getattr(message, "type", None))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def deliver(self, message: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception as e:
                self._log.exception(
                    "host.listener.error",
                    type=getattr(message, "type", None),
                    error=str(e),
                )

    def sent_of_type(self, message_type: str) -> List[Any]:
        return [m for m in self.sent if getattr(m, "type", None) == message_type]
