"""Unit tests for the host bridge."""

import asyncio

import pytest

from src.common.bridge import HostBridge, QueueBridge


class TestHostBridge:
    """Test the abstract contract."""

    def test_methods_not_implemented(self):
        """Test the base class must be subclassed."""
        bridge = HostBridge()
        with pytest.raises(NotImplementedError):
            bridge.signal_ready("resolver")
        with pytest.raises(NotImplementedError):
            bridge.send("init")
        with pytest.raises(NotImplementedError):
            bridge.close()


class TestQueueBridge:
    """Test the in-memory bridge."""

    def test_signal_ready_sends_init(self):
        """Test readiness is recorded and sent as an init event."""
        bridge = QueueBridge()
        bridge.signal_ready("drop_pipeline")

        assert bridge.ready_components == {"drop_pipeline"}
        assert bridge.events.get_nowait() == ("init", "drop_pipeline")

    def test_signal_ready_twice(self):
        """Test a repeated readiness signal is not sent again."""
        bridge = QueueBridge()
        bridge.signal_ready("resolver")
        bridge.signal_ready("resolver")

        assert bridge.events.qsize() == 1

    def test_send_after_close(self):
        """Test sending on a closed bridge raises."""
        bridge = QueueBridge()
        bridge.close()
        with pytest.raises(RuntimeError, match="closed"):
            bridge.send("result", "[]")

    def test_wait_until_ready(self):
        """Test the waiter returns once every component reported."""

        async def main():
            bridge = QueueBridge()
            waiter = asyncio.create_task(
                bridge.wait_until_ready(["resolver", "captcha_pipeline"])
            )
            await asyncio.sleep(0)
            bridge.signal_ready("resolver")
            await asyncio.sleep(0)
            first_done = waiter.done()
            bridge.signal_ready("captcha_pipeline")
            await asyncio.wait_for(waiter, timeout=1)
            return first_done

        assert asyncio.run(main()) is False

    def test_wait_until_ready_already_ready(self):
        """Test the waiter returns immediately if nothing is missing."""

        async def main():
            bridge = QueueBridge()
            bridge.signal_ready("resolver")
            await asyncio.wait_for(bridge.wait_until_ready(["resolver"]), timeout=1)

        asyncio.run(main())
