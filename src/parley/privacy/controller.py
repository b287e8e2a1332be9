"""Setting controller for one privacy section.

Drives a single editing session for one privacy key:

1. ``start()`` subscribes to the surface's "closed" signal and fetches the
   current rules (state LOADING)
2. The fetched rules are hydrated into a PrivacySetting (state READY); level
   changes and picker results are applied to it live
3. When the surface closes, the setting is compiled and written once
   (state COMMITTED). Closing before the fetch resolves discards the session
   (state DISCARDED) and the late fetch result is dropped. A close signalled
   outside a running event loop writes synchronously instead of scheduling
   a task.

Fetch failures leave the controller in LOADING for good; the user has to
reopen the surface. Write failures are logged and never retried.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Optional

from ..core.exceptions import StateError, ValidationException
from .compiler import compile_rules
from .hydrator import hydrate_rules
from .lifecycle import LifecycleSignal
from .picker import PeerPicker
from .rules import PrivacyRule
from .store import ExceptionSummary, PrivacySetting
from .types import ExceptionCategory, PeerId, PrivacyKey, VisibilityLevel

if TYPE_CHECKING:
    from ..transport.adapter import RuleTransport

logger = logging.getLogger(__name__)


class ControllerState(StrEnum):
    """Lifecycle state of a :class:`SettingController`."""

    LOADING = "loading"
    READY = "ready"
    COMMITTED = "committed"
    DISCARDED = "discarded"


@dataclass
class SectionOptions:
    """Static configuration of one privacy section."""

    key: PrivacyKey
    title: str = ""
    no_exceptions: bool = False
    skip_levels: tuple[VisibilityLevel, ...] = ()
    captions: dict[VisibilityLevel, str] = field(default_factory=dict)
    exception_titles: dict[ExceptionCategory, str] = field(default_factory=dict)
    on_level_change: Optional[Callable[[VisibilityLevel], Any]] = None
    on_summary_change: Optional[Callable[[ExceptionCategory, ExceptionSummary], Any]] = None

    def __post_init__(self) -> None:
        self.key = PrivacyKey.parse(self.key)
        self.skip_levels = tuple(VisibilityLevel.parse(level) for level in self.skip_levels)


class SettingController:
    """Owns one fetch → edit → commit session for a privacy key."""

    def __init__(
        self,
        options: SectionOptions,
        transport: "RuleTransport",
        lifecycle: LifecycleSignal,
    ):
        self.options = options
        self.transport = transport
        self.lifecycle = lifecycle

        self.state = ControllerState.LOADING
        self.committed_rules: Optional[list[PrivacyRule]] = None
        self.write_task: Optional[asyncio.Task] = None

        self._setting: Optional[PrivacySetting] = None
        self._summaries: dict[ExceptionCategory, ExceptionSummary] = {
            ExceptionCategory.ALLOW: ExceptionSummary(),
            ExceptionCategory.DISALLOW: ExceptionSummary(),
        }
        self._committed = False
        self._load_task: Optional[asyncio.Task] = None

    # -- properties ----------------------------------------------------------

    @property
    def key(self) -> PrivacyKey:
        return self.options.key

    @property
    def setting(self) -> Optional[PrivacySetting]:
        """The live setting while READY, otherwise None."""
        return self._setting

    @property
    def available_levels(self) -> list[VisibilityLevel]:
        return [level for level in VisibilityLevel if level not in self.options.skip_levels]

    @property
    def level(self) -> Optional[VisibilityLevel]:
        return self._setting.level if self._setting is not None else None

    @property
    def caption(self) -> str:
        """Caption for the current level, empty when there is none."""
        if self.level is None:
            return ""
        return self.options.captions.get(self.level, "")

    @property
    def has_exceptions(self) -> bool:
        return not self.options.no_exceptions

    def summary(self, category: ExceptionCategory) -> ExceptionSummary:
        return self._summaries[ExceptionCategory(category)]

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> asyncio.Task:
        """Subscribe to the close signal and begin fetching.

        Must be called from inside a running event loop.

        Raises:
            StateError: If the controller was already started
        """
        if self._load_task is not None:
            raise StateError("Controller already started", {"key": self.key.value})

        self.lifecycle.subscribe(self._on_closed, once=True)
        self._load_task = asyncio.get_running_loop().create_task(self.load())
        return self._load_task

    async def load(self) -> bool:
        """Fetch and hydrate the current rules.

        Returns:
            True if the controller became READY
        """
        try:
            rules = await self.transport.fetch_rules(self.key)
        except Exception as e:
            logger.warning(f"Failed to fetch privacy rules for {self.key.value}: {e}")
            return False

        if self.state is not ControllerState.LOADING:
            logger.info(f"Discarding fetched rules for {self.key.value} (state={self.state.value})")
            return False

        result = hydrate_rules(rules, with_exceptions=self.has_exceptions)
        self._setting = result.setting
        self._summaries = {
            ExceptionCategory.ALLOW: result.allow_summary,
            ExceptionCategory.DISALLOW: result.disallow_summary,
        }
        if result.setting.exceptions is not None:
            result.setting.exceptions.on_change(self._on_exceptions_changed)

        self.state = ControllerState.READY
        logger.debug(f"Loaded {self.key.value}: level={result.setting.level.name}")
        self._notify_level()
        return True

    async def wait_ready(self) -> bool:
        """Wait for the fetch to settle. True if the controller is READY."""
        if self._load_task is None:
            raise StateError("Controller not started", {"key": self.key.value})
        await asyncio.shield(self._load_task)
        return self.state is ControllerState.READY

    # -- edits ---------------------------------------------------------------

    def set_level(self, level: VisibilityLevel | str | int) -> bool:
        """Select a base level. Returns False if there is nothing to edit yet.

        Raises:
            ValidationException: If the level is unknown or not offered
        """
        level = VisibilityLevel.parse(level)
        if level in self.options.skip_levels:
            raise ValidationException("Level not offered for this setting", field="level", value=level.name)

        if self.state is not ControllerState.READY or self._setting is None:
            logger.debug(f"Ignoring level change for {self.key.value} in state {self.state.value}")
            return False

        self._setting.set_level(level)
        self._notify_level()
        return True

    def replace_exceptions(self, category: ExceptionCategory, peer_ids: Iterable[PeerId]) -> bool:
        """Replace one exception list. Returns False if there is nothing to edit yet."""
        category = ExceptionCategory(category)
        if self.state is not ControllerState.READY or self._setting is None:
            logger.debug(f"Ignoring {category.value} exceptions for {self.key.value} in state {self.state.value}")
            return False
        if self._setting.exceptions is None:
            logger.debug(f"{self.key.value} has no exception lists")
            return False

        self._setting.exceptions.replace(category, peer_ids)
        return True

    async def pick_exceptions(self, category: ExceptionCategory, picker: PeerPicker) -> bool:
        """Open ``picker`` for ``category`` once the rules are loaded.

        The picker's completion replaces the list if the session is still
        editable at that point.

        Returns:
            False if the session never became editable
        """
        category = ExceptionCategory(category)
        if not await self.wait_ready() or self._setting is None or self._setting.exceptions is None:
            return False

        picker.open(
            self._setting.exceptions.peers(category),
            lambda selection: self.replace_exceptions(category, selection),
            title=self.options.exception_titles.get(category),
        )
        return True

    def compile(self) -> list[PrivacyRule]:
        """Rules the current state would commit.

        Raises:
            StateError: If the controller is not READY
        """
        if self.state is not ControllerState.READY or self._setting is None:
            raise StateError("Nothing to compile", {"key": self.key.value, "state": self.state.value})
        return compile_rules(self._setting)

    # -- commit --------------------------------------------------------------

    def _on_closed(self) -> None:
        if self._committed or self.state in (ControllerState.COMMITTED, ControllerState.DISCARDED):
            logger.debug(f"Ignoring repeated close for {self.key.value}")
            return

        if self.state is ControllerState.LOADING:
            self.state = ControllerState.DISCARDED
            logger.info(f"Surface for {self.key.value} closed before rules loaded; nothing to commit")
            return

        try:
            loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        self._committed = True
        rules = compile_rules(self._setting)
        self.committed_rules = rules
        self._setting = None
        self.state = ControllerState.COMMITTED

        logger.info(f"Committing {len(rules)} privacy rules for {self.key.value}")
        if loop is None:
            self._write_blocking(rules)
            return
        self.write_task = loop.create_task(self.transport.write_rules(self.key, rules))
        self.write_task.add_done_callback(self._on_write_done)

    def _write_blocking(self, rules: list[PrivacyRule]) -> None:
        # Closed outside any event loop: run the write to completion here.
        try:
            asyncio.run(self.transport.write_rules(self.key, rules))
        except Exception as e:
            logger.error(f"Failed to write privacy rules for {self.key.value}: {e}")

    def _on_write_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            logger.warning(f"Write of privacy rules for {self.key.value} was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Failed to write privacy rules for {self.key.value}: {exc}")

    # -- notifications -------------------------------------------------------

    def _notify_level(self) -> None:
        if self.options.on_level_change and self.level is not None:
            self.options.on_level_change(self.level)

    def _on_exceptions_changed(self, category: ExceptionCategory, summary: ExceptionSummary) -> None:
        self._summaries[category] = summary
        if self.options.on_summary_change:
            self.options.on_summary_change(category, summary)
