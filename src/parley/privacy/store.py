"""
Live exception lists and the privacy setting that owns them.

The store is mutated by the peer picker (full replacement per category) and by
level changes (visibility flags), and read once by the compiler at commit time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Optional

from ..core.exceptions import ValidationException
from .peers import PeerSplit, split_peers_by_type
from .types import (
    ExceptionCategory,
    ExceptionVisibility,
    PeerId,
    VisibilityLevel,
    is_valid_peer_id,
    visibility_for,
)

logger = logging.getLogger(__name__)

# (message key, count) -> display text
Translator = Callable[[str, int], str]


def _default_translate(key: str, count: int) -> str:
    if key == "add_users":
        return "Add Users"
    noun = "user" if key == "users" else "chat"
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


@dataclass(frozen=True)
class ExceptionSummary:
    """Counts shown in an exception row subtitle."""

    individuals: int = 0
    groups: int = 0

    @classmethod
    def from_split(cls, split: PeerSplit) -> "ExceptionSummary":
        return cls(individuals=len(split.individuals), groups=len(split.groups))

    @property
    def is_empty(self) -> bool:
        return not self.individuals and not self.groups

    def describe(self, translate: Optional[Translator] = None) -> str:
        """Render the subtitle, e.g. ``"2 users, 1 chat"`` or ``"Add Users"``."""
        translate = translate or _default_translate
        if self.is_empty:
            return translate("add_users", 0)
        parts = []
        if self.individuals:
            parts.append(translate("users", self.individuals))
        if self.groups:
            parts.append(translate("chats", self.groups))
        return ", ".join(parts)


ChangeListener = Callable[[ExceptionCategory, ExceptionSummary], Any]


class ExceptionStore:
    """Allow/disallow peer lists plus their visibility flags."""

    def __init__(
        self,
        allow: Optional[Iterable[PeerId]] = None,
        disallow: Optional[Iterable[PeerId]] = None,
        level: VisibilityLevel = VisibilityLevel.NOBODY,
    ):
        self._peers: dict[ExceptionCategory, list[PeerId]] = {
            ExceptionCategory.ALLOW: list(allow or []),
            ExceptionCategory.DISALLOW: list(disallow or []),
        }
        self._visible: dict[ExceptionCategory, bool] = {}
        self._listeners: list[ChangeListener] = []
        self.apply_level(level)

    @property
    def allow(self) -> list[PeerId]:
        return self.peers(ExceptionCategory.ALLOW)

    @property
    def disallow(self) -> list[PeerId]:
        return self.peers(ExceptionCategory.DISALLOW)

    @property
    def visible(self) -> ExceptionVisibility:
        return ExceptionVisibility(
            allow=self._visible[ExceptionCategory.ALLOW],
            disallow=self._visible[ExceptionCategory.DISALLOW],
        )

    def peers(self, category: ExceptionCategory) -> list[PeerId]:
        """Copy of the current list for ``category``."""
        return list(self._peers[ExceptionCategory(category)])

    def is_visible(self, category: ExceptionCategory) -> bool:
        return self._visible[ExceptionCategory(category)]

    def summary(self, category: ExceptionCategory) -> ExceptionSummary:
        return ExceptionSummary.from_split(split_peers_by_type(self._peers[ExceptionCategory(category)]))

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a listener for :meth:`replace`. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replace(self, category: ExceptionCategory, peer_ids: Iterable[PeerId]) -> ExceptionSummary:
        """Replace the whole list for ``category`` with ``peer_ids``.

        This is never a merge: the picker hands back its final selection.

        Raises:
            ValidationException: If any id is not a non-zero integer
        """
        category = ExceptionCategory(category)
        new_peers = list(peer_ids)
        for peer_id in new_peers:
            if not is_valid_peer_id(peer_id):
                raise ValidationException("Invalid peer id", field=category.value, value=peer_id)

        self._peers[category] = new_peers
        summary = self.summary(category)
        logger.debug(f"Replaced {category.value} exceptions ({len(new_peers)} peers)")

        for listener in list(self._listeners):
            listener(category, summary)
        return summary

    def apply_level(self, level: VisibilityLevel) -> None:
        """Recompute both visibility flags for ``level``."""
        visibility = visibility_for(level)
        self._set_visible(ExceptionCategory.ALLOW, visibility.allow)
        self._set_visible(ExceptionCategory.DISALLOW, visibility.disallow)

    def _set_visible(self, category: ExceptionCategory, visible: bool) -> None:
        self._visible[category] = visible

    def __repr__(self) -> str:
        return (
            f"ExceptionStore(allow={self._peers[ExceptionCategory.ALLOW]!r}, "
            f"disallow={self._peers[ExceptionCategory.DISALLOW]!r}, visible={self.visible!r})"
        )


class PrivacySetting:
    """
    In-memory privacy setting being edited.

    ``exceptions`` is None when the setting does not support exception lists.
    Assigning ``level`` recomputes the store's visibility flags.
    """

    def __init__(
        self,
        level: VisibilityLevel = VisibilityLevel.NOBODY,
        exceptions: Optional[ExceptionStore] = None,
    ):
        self.exceptions = exceptions
        self.level = level

    @property
    def level(self) -> VisibilityLevel:
        return self._level

    @level.setter
    def level(self, level: VisibilityLevel) -> None:
        self._level = VisibilityLevel.parse(level)
        if self.exceptions is not None:
            self.exceptions.apply_level(self._level)

    @property
    def visible(self) -> ExceptionVisibility:
        if self.exceptions is None:
            return ExceptionVisibility(allow=False, disallow=False)
        return self.exceptions.visible

    def set_level(self, level: VisibilityLevel) -> None:
        self.level = level

    def __repr__(self) -> str:
        return f"PrivacySetting(level={self._level.name}, exceptions={self.exceptions!r})"
