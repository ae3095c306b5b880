from __future__ import annotations
import threading
from typing import Callable, Dict, List, Tuple

from .projection import MenuEntry, build_title
from .service import MenuService
from .state import StateSnapshot


def render_menu(entries: List[MenuEntry], indent: str = "") -> Tuple[List[str], Dict[int, Callable[[], None]]]:
    """
    Flatten menu entries into printable lines. Clickable rows get a number,
    selected rows a check mark, and submenu children are indented.
    """
    lines: List[str] = []
    actions: Dict[int, Callable[[], None]] = {}

    def _walk(items: List[MenuEntry], prefix: str) -> None:
        for item in items:
            if item.separator:
                lines.append(f"{prefix}----")
                continue
            mark = "✓ " if item.state else "  "
            if item.clicked is not None:
                number = len(actions) + 1
                actions[number] = item.clicked
                lines.append(f"{prefix}[{number}] {mark}{item.text}")
            else:
                lines.append(f"{prefix}    {mark}{item.text}")
            if item.children:
                _walk(item.children, prefix + "    ")

    _walk(entries, indent)
    return lines, actions


class ConsoleHost:
    """
    Terminal stand-in for a menu bar: shows the title whenever it changes and
    renders the menu on demand. Clicks run synchronously on this thread.
    """

    def __init__(
        self,
        service: MenuService,
        read_line: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self.service = service
        self._read_line = read_line
        self._write = write
        self._title = ""

    def on_state(self, snap: StateSnapshot) -> None:
        # Runs under the state lock: use the snapshot, never the service
        title = build_title(snap)
        if title != self._title:
            self._title = title
            self._write(f"AirMenu: {title or '-'}")

    def run_once(self) -> bool:
        """Show the menu and handle one choice. Returns False when the user quits."""
        lines, actions = render_menu(self.service.menu_items())
        self._write(f"== {self.service.title() or 'AirMenu'} ==")
        for line in lines:
            self._write(line)

        try:
            choice = self._read_line("Select [number, enter to refresh, q to quit]: ").strip().lower()
        except EOFError:
            return False

        if choice in ("q", "quit"):
            return False
        if not choice:
            return True
        if not choice.isdigit() or int(choice) not in actions:
            self._write(f"Unknown entry: {choice}")
            return True

        result = actions[int(choice)]()
        if isinstance(result, threading.Thread):
            # the credential prompt shares this terminal
            result.join()
        return True

    def run(self) -> None:
        while self.run_once():
            pass
