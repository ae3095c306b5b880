from __future__ import annotations
from dotenv import load_dotenv
load_dotenv()  # Load .env file before importing app modules

import logging
from dataclasses import dataclass
from typing import Optional

from airmenu.config import LOG_LEVEL, MODE
from airmenu.console import ConsoleHost
from airmenu.lifecycle import ClientFactory, ClientManager
from airmenu.poller import Poller
from airmenu.prompt import ConsolePrompt, CredentialPrompt
from airmenu.service import MenuService
from airmenu.settings import SettingsStore
from airmenu.state import AppState

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(levelname)s: %(name)s: %(message)s'
)
# Keep connection pool chatter out of the log
logging.getLogger("urllib3").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@dataclass
class App:
    state: AppState
    settings: SettingsStore
    clients: ClientManager
    poller: Poller
    service: MenuService


def create_app(
    settings: Optional[SettingsStore] = None,
    prompt: Optional[CredentialPrompt] = None,
    client_factory: Optional[ClientFactory] = None,
) -> App:
    """Wire the shared state to its poller, client manager and menu service."""
    state = AppState()
    settings = settings or SettingsStore()
    clients = ClientManager(state, settings, prompt or ConsolePrompt(), client_factory)
    poller = Poller(state)
    service = MenuService(state, settings, clients, poller)
    service.restore_focus()
    return App(state=state, settings=settings, clients=clients, poller=poller, service=service)


def main() -> None:
    app = create_app()
    host = ConsoleHost(app.service)
    app.state.subscribe(host.on_state)

    logger.info(f"Starting AirMenu in {MODE} mode")
    app.poller.start()
    # poller retries every second until this installs a client
    app.clients.ensure_client(force_new=False)
    try:
        host.run()
    except KeyboardInterrupt:
        pass
    finally:
        app.poller.stop(timeout=1.0)


if __name__ == "__main__":
    main()
