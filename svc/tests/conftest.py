import time
from typing import List, Optional

import pytest

from airmenu.models import Device, Reading
from airmenu.poller import Poller
from airmenu.settings import SettingsStore
from airmenu.sources.interface import DataSourceError
from airmenu.state import AppState


DEVICES = [
    Device(id="dev-1", deviceType="VIEW_PLUS", sensors=["co2", "temp"], productName="View Plus"),
    Device(id="dev-2", deviceType="WAVE_MINI", sensors=["temp", "voc"], productName="Wave Mini"),
]


def make_reading(**overrides) -> Reading:
    values = dict(
        time=int(time.time()),
        battery=88,
        co2=412.7,
        humidity=41.3,
        pm1=3.2,
        pm25=7.9,
        pressure=1009.4,
        radonShortTermAvg=38.04,
        relayDeviceType="hub",
        rssi=-61,
        temp=21.46,
        voc=118.9,
    )
    values.update(overrides)
    return Reading(**values)


class FakeSource:
    """Scriptable data source: queue exceptions to make the next calls fail."""

    def __init__(self, devices: Optional[List[Device]] = None, reading: Optional[Reading] = None) -> None:
        self.devices = list(DEVICES) if devices is None else list(devices)
        self.reading = reading or make_reading()
        self.device_errors: List[Exception] = []
        self.reading_errors: List[Exception] = []
        self.device_calls = 0
        self.reading_calls: List[str] = []

    def list_devices(self) -> List[Device]:
        self.device_calls += 1
        if self.device_errors:
            raise self.device_errors.pop(0)
        return list(self.devices)

    def latest_reading(self, device_id: str) -> Reading:
        self.reading_calls.append(device_id)
        if self.reading_errors:
            raise self.reading_errors.pop(0)
        return self.reading


class ScriptedPrompt:
    """Prompt returning canned answers in order (None means cancel)."""

    def __init__(self, *answers) -> None:
        self.answers = list(answers)
        self.calls = 0

    def ask(self, message, labels):
        self.calls += 1
        return self.answers.pop(0)


class SleepRecorder:
    """Stands in for the poller's wait; stops the poller after `limit` waits."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.delays: List[float] = []
        self.poller: Optional[Poller] = None

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if len(self.delays) >= self.limit and self.poller is not None:
            self.poller.stop()


@pytest.fixture
def state():
    return AppState()


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def settings(tmp_path):
    return SettingsStore(str(tmp_path / "settings.json"))


@pytest.fixture
def make_poller(state):
    """Build a poller whose waits are recorded instead of slept."""

    def _make(limit: int = 1):
        recorder = SleepRecorder(limit)
        poller = Poller(state, sleep=recorder)
        recorder.poller = poller
        return poller, recorder

    return _make


@pytest.fixture
def boom():
    return DataSourceError("GET devices 500")
