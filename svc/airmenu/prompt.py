from __future__ import annotations
import getpass
from typing import Callable, List, Optional, Protocol, Sequence


class CredentialPrompt(Protocol):
    """Interactive prompt: returns one string per label, or None when cancelled."""

    def ask(self, message: str, labels: Sequence[str]) -> Optional[List[str]]:
        ...


class ConsolePrompt:
    """
    Terminal prompt. Labels containing "secret" are read without echo.
    Answering "n" at the confirmation, EOF or Ctrl-C cancels.
    """

    def __init__(
        self,
        read_line: Callable[[str], str] = input,
        read_secret: Callable[[str], str] = getpass.getpass,
    ) -> None:
        self._read_line = read_line
        self._read_secret = read_secret

    def ask(self, message: str, labels: Sequence[str]) -> Optional[List[str]]:
        print(message)
        try:
            values = []
            for label in labels:
                reader = self._read_secret if "secret" in label.lower() else self._read_line
                values.append(reader(f"{label}: "))
            answer = self._read_line("Ok? [Y/n] ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            print()
            return None
        if answer in ("n", "no", "cancel"):
            return None
        return values
