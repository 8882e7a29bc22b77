"""
Host bridge contract.

The recognition core only talks to its controlling host through three calls:
``signal_ready``, ``send`` and ``close``. ``QueueBridge`` is an in-process
implementation that records every event on an ``asyncio.Queue`` and lets a
supervisor hold traffic back until all components have reported ready.
"""

import asyncio
import logging
from typing import Any, Iterable, Optional, Set, Tuple

logger = logging.getLogger(__name__)


class HostBridge:
    """Narrow duplex channel to the controlling host process."""

    def signal_ready(self, component: str) -> None:
        raise NotImplementedError

    def send(self, event: str, payload: Any = None) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class QueueBridge(HostBridge):
    """
    Bridge that keeps events in memory.

    Events are ``(event, payload)`` tuples. Readiness is sent as the
    ``"init"`` event with the component name as payload.

    Example:
        >>> bridge = QueueBridge()
        >>> bridge.signal_ready("resolver")
        >>> bridge.ready_components
        {'resolver'}
    """

    def __init__(self) -> None:
        self.events: "asyncio.Queue[Tuple[str, Any]]" = asyncio.Queue()
        self.ready_components: Set[str] = set()
        self.closed = False
        self._ready_changed: Optional[asyncio.Event] = None

    def signal_ready(self, component: str) -> None:
        if component in self.ready_components:
            logger.warning(f"Component '{component}' signalled ready twice")
            return
        self.ready_components.add(component)
        logger.info(f"Component ready: {component}")
        self.send("init", component)
        if self._ready_changed is not None:
            self._ready_changed.set()

    def send(self, event: str, payload: Any = None) -> None:
        if self.closed:
            raise RuntimeError("Bridge is closed")
        self.events.put_nowait((event, payload))

    def close(self) -> None:
        self.closed = True
        logger.info("Host bridge closed")

    async def wait_until_ready(self, components: Iterable[str]) -> None:
        """Block until every component in ``components`` has signalled ready."""
        expected = set(components)
        if self._ready_changed is None:
            self._ready_changed = asyncio.Event()
        while not expected <= self.ready_components:
            self._ready_changed.clear()
            await self._ready_changed.wait()
