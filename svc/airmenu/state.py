from __future__ import annotations
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from .models import Device, MetricKey, Reading
from .sources.interface import DataSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReadWriteLock:
    """
    Multiple-reader / single-writer lock.

    Readers share the lock; a writer excludes readers and other writers. A
    waiting writer blocks new readers so the poller is not starved by a host
    that re-renders the menu constantly. Not reentrant: a thread holding the
    write lock must not take the read lock.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


@dataclass(frozen=True)
class StateSnapshot:
    """Consistent, immutable view of the application state at one instant."""
    client: Optional[DataSource] = None
    client_generation: int = 0
    devices: Tuple[Device, ...] = ()
    selected_device_id: str = ""
    reading: Optional[Reading] = None
    focused_metric: Optional[MetricKey] = None
    error: Optional[str] = None


Listener = Callable[[StateSnapshot], Any]


class StateTransaction:
    """
    Mutations available while holding exclusive access to an AppState.

    Obtained from `AppState.exclusive()`; only valid inside that block.
    """

    def __init__(self, snapshot: StateSnapshot) -> None:
        self._snap = snapshot
        self.changed = False

    @property
    def snapshot(self) -> StateSnapshot:
        return self._snap

    @property
    def client(self) -> Optional[DataSource]:
        return self._snap.client

    @property
    def devices(self) -> Tuple[Device, ...]:
        return self._snap.devices

    @property
    def selected_device_id(self) -> str:
        return self._snap.selected_device_id

    @property
    def reading(self) -> Optional[Reading]:
        return self._snap.reading

    @property
    def focused_metric(self) -> Optional[MetricKey]:
        return self._snap.focused_metric

    @property
    def error(self) -> Optional[str]:
        return self._snap.error

    def _update(self, **fields: Any) -> None:
        self._snap = replace(self._snap, **fields)
        self.changed = True

    def set_client(self, client: Optional[DataSource]) -> None:
        self._update(client=client, client_generation=self._snap.client_generation + 1)

    def set_devices(self, devices: Sequence[Device]) -> None:
        # replaced wholesale, never merged
        self._update(devices=tuple(devices))

    def set_selected_device(self, device_id: str) -> None:
        self._update(selected_device_id=device_id)

    def set_reading(self, reading: Optional[Reading]) -> None:
        self._update(reading=reading)

    def set_error(self, error: Optional[str]) -> None:
        self._update(error=error)

    def set_focused_metric(self, metric: Optional[MetricKey]) -> None:
        self._update(focused_metric=metric)

    def clear_for_new_client(self, client: DataSource) -> None:
        """Install a new client and drop everything derived from the old one, in one step."""
        self._update(
            client=client,
            client_generation=self._snap.client_generation + 1,
            devices=(),
            selected_device_id="",
            reading=None,
            error=None,
        )


class AppState:
    """
    The single shared state of the application.

    Mutated by the poller thread, the credential-reset thread and host UI
    callbacks; read by the projection. All access goes through one
    ReadWriteLock. Subscribers receive a snapshot after every exclusive
    section that changed something, while the lock is still held, so they
    observe changes in the order they were made and must not call back into
    the store.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._snap = StateSnapshot()
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # read

    def read(self, fn: Callable[[StateSnapshot], T]) -> T:
        with self._lock.read_locked():
            return fn(self._snap)

    def snapshot(self) -> StateSnapshot:
        return self.read(lambda s: s)

    # write

    @contextmanager
    def exclusive(self) -> Iterator[StateTransaction]:
        with self._lock.write_locked():
            tx = StateTransaction(self._snap)
            try:
                yield tx
            finally:
                # changes made before an exception are kept
                if tx.changed:
                    self._snap = tx.snapshot
                    self._publish(self._snap)

    def _publish(self, snap: StateSnapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("State listener failed")

    def set_client(self, client: Optional[DataSource]) -> None:
        with self.exclusive() as tx:
            tx.set_client(client)

    def set_devices(self, devices: Sequence[Device]) -> None:
        with self.exclusive() as tx:
            tx.set_devices(devices)

    def set_selected_device(self, device_id: str) -> None:
        with self.exclusive() as tx:
            tx.set_selected_device(device_id)

    def set_reading(self, reading: Optional[Reading]) -> None:
        with self.exclusive() as tx:
            tx.set_reading(reading)

    def set_error(self, error: Optional[str]) -> None:
        with self.exclusive() as tx:
            tx.set_error(error)

    def set_focused_metric(self, metric: Optional[MetricKey]) -> None:
        with self.exclusive() as tx:
            tx.set_focused_metric(metric)

    def clear_for_new_client(self, client: DataSource) -> None:
        with self.exclusive() as tx:
            tx.clear_for_new_client(client)
