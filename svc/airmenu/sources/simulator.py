# airmenu/sources/simulator.py
from __future__ import annotations
import logging
import random
import threading
import time
from typing import Dict, List, Optional

from airmenu.models import Device, Reading
from .interface import DataSourceError

logger = logging.getLogger(__name__)

_DEFAULT_DEVICES = [
    Device(
        id="2960000001",
        device_type="VIEW_PLUS",
        sensors=["co2", "humidity", "pm1", "pm25", "pressure", "radonShortTermAvg", "temp", "voc"],
        product_name="View Plus (sim)",
    ),
    Device(
        id="2930000002",
        device_type="WAVE_PLUS",
        sensors=["co2", "humidity", "pressure", "radonShortTermAvg", "temp", "voc"],
        product_name="Wave Plus (sim)",
    ),
]

# name: (start value, max step per poll, lower bound, upper bound)
_DRIFT = {
    "co2": (620.0, 40.0, 400.0, 2000.0),
    "humidity": (42.0, 1.5, 10.0, 90.0),
    "pm1": (3.0, 1.0, 0.0, 80.0),
    "pm25": (5.0, 1.5, 0.0, 120.0),
    "pressure": (1012.0, 0.8, 950.0, 1060.0),
    "radon_short_term_avg": (38.0, 4.0, 0.0, 400.0),
    "temp": (21.5, 0.3, 10.0, 35.0),
    "voc": (110.0, 15.0, 0.0, 2000.0),
}


class SimulatedClient:
    """
    In-process stand-in for the Airthings API.

    Serves a fixed device list and, per device, readings that random-walk
    between polls so the menu has something to show without credentials.
    """

    def __init__(
        self,
        client_id: str = "",
        client_secret: str = "",
        devices: Optional[List[Device]] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.client_id = client_id
        self.devices = list(devices) if devices is not None else list(_DEFAULT_DEVICES)
        self._rng = random.Random(seed)
        self._values: Dict[str, Dict[str, float]] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"SimulatedClient(devices={len(self.devices)})"

    def list_devices(self) -> List[Device]:
        return list(self.devices)

    def latest_reading(self, device_id: str) -> Reading:
        if not any(d.id == device_id for d in self.devices):
            raise DataSourceError("GET latest-samples 404")

        with self._lock:
            values = self._values.setdefault(
                device_id, {name: start for name, (start, _, _, _) in _DRIFT.items()}
            )
            for name, (_, step, low, high) in _DRIFT.items():
                values[name] = min(high, max(low, values[name] + self._rng.uniform(-step, step)))
            sample = dict(values)

        return Reading(
            time=int(time.time()),
            battery=100,
            rssi=-60,
            relay_device_type="hub",
            **sample,
        )
