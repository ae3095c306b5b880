# airmenu/sources/interface.py
from __future__ import annotations
from typing import List, Protocol

from airmenu.models import Device, Reading


class DataSourceError(Exception):
    """Raised by a data source for any failed fetch (transport, status or payload)."""


class DataSource(Protocol):
    """
    Minimal interface every remote data source must implement.
    One instance is bound to one set of credentials. Both calls block and
    share no session state besides authentication.
    """

    def list_devices(self) -> List[Device]:
        """Return every device on the account."""
        ...

    def latest_reading(self, device_id: str) -> Reading:
        """Return the most recent sample of all sensors of one device."""
        ...
