from __future__ import annotations
import logging
import threading
from typing import List, Optional

from . import config
from .lifecycle import ClientManager
from .models import MetricKey
from .poller import Poller
from .projection import MenuEntry, build_menu, build_title
from .settings import SettingsStore
from .state import AppState

logger = logging.getLogger(__name__)


class MenuService:
    """Entry point for the host UI: snapshots for rendering, actions for clicks."""

    def __init__(
        self,
        state: AppState,
        settings: SettingsStore,
        clients: ClientManager,
        poller: Poller,
    ) -> None:
        self.state = state
        self.settings = settings
        self.clients = clients
        self.poller = poller
        self.last_refresh: Optional[threading.Thread] = None

    # read
    def title(self) -> str:
        return self.state.read(build_title)

    def menu_items(self, now: Optional[float] = None) -> List[MenuEntry]:
        return self.state.read(lambda snap: build_menu(snap, self, now))

    # write
    def restore_focus(self) -> None:
        """Restore the metric focused in a previous session."""
        metric = MetricKey.parse(self.settings.get(config.SELECTED_SENSOR_KEY))
        if metric is not None:
            self.state.set_focused_metric(metric)

    def toggle_metric(self, metric: MetricKey) -> None:
        with self.state.exclusive() as tx:
            new_focus = None if tx.focused_metric == metric else metric
            tx.set_focused_metric(new_focus)
            self.settings.set(config.SELECTED_SENSOR_KEY, new_focus.value if new_focus else "")
        logger.info(f"Focused metric: {new_focus.value if new_focus else 'none'}")

    def select_device(self, device_id: str) -> None:
        # Not checked against the device list; a stale id is kept until a reset
        with self.state.exclusive() as tx:
            tx.set_selected_device(device_id)
        logger.info(f"Selected device {device_id}")

    def reset_credentials(self) -> threading.Thread:
        """
        Prompt for new credentials off the caller's thread. The returned thread
        ends once the prompt is answered; a successful reset then triggers one
        immediate poll on its own thread (kept in `last_refresh`).
        """

        def _reset() -> None:
            if not self.clients.ensure_client(force_new=True):
                return
            refresh = threading.Thread(target=self.poller.refresh_once, name="airmenu-refresh", daemon=True)
            self.last_refresh = refresh
            refresh.start()

        t = threading.Thread(target=_reset, name="airmenu-reset", daemon=True)
        t.start()
        return t
