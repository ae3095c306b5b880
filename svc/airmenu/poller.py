from __future__ import annotations
import logging
import threading
from typing import Callable, Optional

from .config import ERROR_RETRY_S, NO_CLIENT_RETRY_S, REFRESH_INTERVAL_S
from .sources.interface import DataSourceError
from .state import AppState

logger = logging.getLogger(__name__)


class Poller:
    """
    Background loop that keeps the latest reading in AppState fresh.

    Each cycle runs entirely under exclusive access to the state: ensure a
    client, ensure a selected device, fetch the reading, publish. The network
    calls happen while the write lock is held so a concurrent device selection
    can never interleave with a cycle.

    Waits between cycles:
      - 1 s while no client is installed yet (credentials prompt pending),
      - 60 s after a failed device-list or reading fetch,
      - 300 s after a successful poll.
    """

    def __init__(self, state: AppState, sleep: Optional[Callable[[float], object]] = None) -> None:
        self.state = state
        self._stop_event = threading.Event()
        self._sleep = sleep or self._stop_event.wait
        self._thread: Optional[threading.Thread] = None

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def _poll_cycle(self) -> Optional[float]:
        """Run one cycle. Returns the retry delay on failure, None on success."""
        with self.state.exclusive() as tx:
            client = tx.client
            if client is None:
                return NO_CLIENT_RETRY_S

            # device list is only refreshed while nothing is selected
            if not tx.selected_device_id:
                try:
                    devices = client.list_devices()
                    if not devices:
                        raise DataSourceError("no devices found")
                except Exception as e:
                    msg = f"error getting devices: {e}"
                    logger.error(msg)
                    tx.set_error(msg)
                    return ERROR_RETRY_S
                tx.set_devices(devices)
                tx.set_selected_device(devices[0].id)
                logger.info(f"Selected default device {devices[0].id} ({devices[0].product_name})")

            device_id = tx.selected_device_id
            try:
                reading = client.latest_reading(device_id)
            except Exception as e:
                msg = f"error getting data: {e}"
                logger.error(msg)
                tx.set_error(msg)
                return ERROR_RETRY_S

            tx.set_reading(reading)
            tx.set_error(None)
            logger.debug(f"Fetched reading for {device_id} at {reading.time}")
        return None

    def run(self, recurring: bool = True) -> None:
        """
        Poll until stopped. With `recurring=False` return after the first
        successful cycle; failures are still retried with the usual waits.
        """
        while not self.stopped:
            delay = self._poll_cycle()
            if delay is None:
                if not recurring:
                    return
                delay = REFRESH_INTERVAL_S
            if self.stopped:
                return
            self._sleep(delay)

    def refresh_once(self) -> None:
        self.run(recurring=False)

    def start(self) -> threading.Thread:
        """Start the recurring loop on a daemon thread. Called once at startup."""
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="airmenu-poller", daemon=True)
        self._thread.start()
        logger.info("Poller started")
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the loop; an in-flight fetch still completes and is published."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Poller stopped")
