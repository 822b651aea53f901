from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, cast

from PySide6 import QtCore, QtGui, QtWidgets


@dataclass(frozen=True)
class Shortcut:
    label: str
    keys: tuple[str, ...]
    method: str  # name of the ShortcutHost method it triggers


# ---------------------------------------- #

# Order here is the order shown in the help tooltip.
SHORTCUTS: dict[str, Shortcut] = {
    "toggle_view": Shortcut("Toggle Map / Video", ("V", "Tab"), "toggle_view"),
    "dismiss_logs": Shortcut("Dismiss All Logs", ("D", "Esc"), "dismiss_logs"),
    "fullscreen": Shortcut("Fullscreen", ("F", "F11"), "toggle_fullscreen"),
    "quit": Shortcut("Quit", ("Ctrl+Q",), "close"),
}


class ShortcutHost(Protocol):
    def toggle_view(self) -> None: ...

    def dismiss_logs(self) -> None: ...

    def toggle_fullscreen(self) -> None: ...

    def close(self) -> bool: ...


# ---------------------------------------- #


def shortcut_hint(action: str) -> str:
    """Primary key for an action, or "" if the action is unknown."""
    sc = SHORTCUTS.get(action)
    return "" if sc is None else sc.keys[0]


def shortcut_help() -> str:
    return "\n".join(f"{sc.label}: {' / '.join(sc.keys)}" for sc in SHORTCUTS.values())


def install_shortcuts(window: ShortcutHost) -> list[QtGui.QAction]:
    """
    Adds one window-level QAction per entry in SHORTCUTS.

    Actions live on the window itself so they fire regardless of which
    child widget has focus.
    """
    qw = cast(QtWidgets.QWidget, window)
    actions: list[QtGui.QAction] = []

    for sc in SHORTCUTS.values():
        a = QtGui.QAction(sc.label, qw)
        a.setShortcuts([QtGui.QKeySequence(k) for k in sc.keys])
        a.setShortcutContext(QtCore.Qt.ShortcutContext.WindowShortcut)
        a.triggered.connect(getattr(window, sc.method))
        qw.addAction(a)
        actions.append(a)

    return actions
