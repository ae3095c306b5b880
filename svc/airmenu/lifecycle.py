from __future__ import annotations
import logging
from typing import Callable, Optional

from . import config
from .prompt import CredentialPrompt
from .settings import SettingsStore
from .sources.interface import DataSource
from .state import AppState

logger = logging.getLogger(__name__)

PROMPT_MESSAGE = "Please input the Airthings API client ID and secret"
PROMPT_LABELS = ("Client ID", "Client secret")

ClientFactory = Callable[[str, str], DataSource]


def default_client_factory(client_id: str, client_secret: str) -> DataSource:
    """Build the data source for the configured mode."""
    if config.MODE == "sim":
        from .sources.simulator import SimulatedClient
        return SimulatedClient(client_id, client_secret)

    from .sources.airthings import AirthingsClient
    return AirthingsClient(client_id, client_secret)


class ClientManager:
    """
    Owns the credentials and the data source built from them.

    Installing a client is a single exclusive mutation of AppState that also
    drops the device list, selection, reading and error belonging to the
    previous client, so no reader ever sees a half-reset state.
    """

    def __init__(
        self,
        state: AppState,
        settings: SettingsStore,
        prompt: CredentialPrompt,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.state = state
        self.settings = settings
        self.prompt = prompt
        self.client_factory = client_factory or default_client_factory

    def _ask_credentials(self) -> Optional[tuple[str, str]]:
        while True:
            answer = self.prompt.ask(PROMPT_MESSAGE, PROMPT_LABELS)
            if answer is None:
                return None
            client_id, client_secret = answer[0].strip(), answer[1].strip()
            if client_id and client_secret:
                return client_id, client_secret
            logger.info("Client ID and secret are both required, asking again")

    def ensure_client(self, force_new: bool = False) -> bool:
        """
        Make sure a client exists, prompting for credentials when needed.

        Returns True when a new client was installed, False when nothing
        changed (client already present, or prompt cancelled).
        """
        client_id = self.settings.get(config.CLIENT_ID_KEY)
        client_secret = self.settings.get(config.CLIENT_SECRET_KEY)

        if not force_new and client_id and client_secret:
            if self.state.read(lambda s: s.client) is not None:
                return False
        else:
            creds = self._ask_credentials()
            if creds is None:
                logger.info("Credential prompt cancelled, keeping current client")
                return False
            client_id, client_secret = creds
            self.settings.set(config.CLIENT_ID_KEY, client_id)
            self.settings.set(config.CLIENT_SECRET_KEY, client_secret)

        client = self.client_factory(client_id, client_secret)
        self.state.clear_for_new_client(client)
        logger.info(f"Installed new data source for client {client_id}")
        return True
