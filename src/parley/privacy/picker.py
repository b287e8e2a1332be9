"""Peer picker collaborator.

The picker is opaque to the engine: it receives the current selection and
reports back the user's final selection, which always replaces the list.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Optional, Protocol, runtime_checkable

from .types import PeerId

CompletionCallback = Callable[[list[PeerId]], Any]


@runtime_checkable
class PeerPicker(Protocol):
    """Anything that can let a user choose peers."""

    def open(
        self,
        existing_selection: list[PeerId],
        on_complete: CompletionCallback,
        *,
        title: Optional[str] = None,
    ) -> None:
        """Show the picker; call ``on_complete(final_selection)`` when done."""
        ...


class StaticPeerPicker:
    """Picker that completes immediately with a fixed selection."""

    def __init__(self, selection: Iterable[PeerId]):
        self.selection = list(selection)
        self.opened_with: list[list[PeerId]] = []

    def open(
        self,
        existing_selection: list[PeerId],
        on_complete: CompletionCallback,
        *,
        title: Optional[str] = None,
    ) -> None:
        self.opened_with.append(list(existing_selection))
        on_complete(list(self.selection))
