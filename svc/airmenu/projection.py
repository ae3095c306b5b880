from __future__ import annotations
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol

from .models import MetricKey, Reading
from .state import StateSnapshot

ERROR_SUFFIX = "(err)"

METRIC_FORMATTERS: Dict[MetricKey, Callable[[Reading], str]] = {
    MetricKey.CO2: lambda r: f"CO2: {int(r.co2)} ppm",
    MetricKey.PM25: lambda r: f"PM2.5: {int(r.pm25)} µg/m3",
    MetricKey.TEMP: lambda r: f"Temp.: {r.temp:.1f} °C",
    MetricKey.HUMIDITY: lambda r: f"Hum.: {r.humidity:.1f}%",
    MetricKey.RADON: lambda r: f"Radon: {r.radon_short_term_avg:.1f} Bq/m3",
    MetricKey.PM1: lambda r: f"PM1: {int(r.pm1)} µg/m3",
    MetricKey.VOC: lambda r: f"VOC: {int(r.voc)} ppb",
}


class MenuActions(Protocol):
    def toggle_metric(self, metric: MetricKey) -> None: ...

    def select_device(self, device_id: str) -> None: ...

    def reset_credentials(self) -> Optional[threading.Thread]: ...


@dataclass
class MenuEntry:
    """One row of the host menu."""
    text: str = ""
    clicked: Optional[Callable[[], None]] = None
    state: Optional[bool] = None
    separator: bool = False
    children: Optional[List["MenuEntry"]] = None


def _plural(count: int, unit: str) -> str:
    if count == 1:
        return f"1 {unit} ago"
    return f"{count} {unit}s ago"


def time_ago(timestamp: float, now: Optional[float] = None) -> str:
    """Human age of a unix timestamp, rounded down to minutes, hours or days."""
    if now is None:
        now = time.time()
    minutes = max(0, int((now - timestamp) // 60))
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    return _plural(hours // 24, "day")


def build_title(snap: StateSnapshot) -> str:
    title = ""
    if snap.reading is not None and snap.focused_metric is not None:
        formatter = METRIC_FORMATTERS.get(snap.focused_metric)
        if formatter:
            title += formatter(snap.reading)
    if snap.error is not None:
        title += ERROR_SUFFIX
    return title


def _metric_entry(snap: StateSnapshot, metric: MetricKey, actions: MenuActions) -> MenuEntry:
    return MenuEntry(
        text=METRIC_FORMATTERS[metric](snap.reading),
        clicked=lambda: actions.toggle_metric(metric),
        state=snap.focused_metric == metric,
    )


def build_menu(snap: StateSnapshot, actions: MenuActions, now: Optional[float] = None) -> List[MenuEntry]:
    """
    Project a snapshot into menu rows:

      metric rows + "Updated ..."   (or "Getting data...")
      ---
      Devices > one row per device  (or "Getting devices...")
      ---
      error message                 (only when set)
      Reset credentials
    """
    items: List[MenuEntry] = []

    if snap.reading is not None:
        items.extend(_metric_entry(snap, metric, actions) for metric in MetricKey)
        items.append(MenuEntry(text=f"Updated {time_ago(snap.reading.time, now)}"))
    else:
        items.append(MenuEntry(text="Getting data..."))

    items.append(MenuEntry(separator=True))

    if snap.devices:
        children = [
            MenuEntry(
                text=device.product_name,
                clicked=lambda device_id=device.id: actions.select_device(device_id),
                state=snap.selected_device_id == device.id,
            )
            for device in snap.devices
        ]
        items.append(MenuEntry(text="Devices", children=children))
    else:
        items.append(MenuEntry(text="Getting devices..."))

    items.append(MenuEntry(separator=True))

    if snap.error is not None:
        items.append(MenuEntry(text=snap.error))

    items.append(MenuEntry(text="Reset credentials", clicked=actions.reset_credentials))
    return items
