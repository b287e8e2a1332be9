"""Build a PrivacySetting from a fetched rule list."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

from .rules import BASE_RULE_LEVEL, EXCEPTION_RULE_TARGET, PrivacyRule
from .store import ExceptionStore, ExceptionSummary, PrivacySetting
from .types import ExceptionCategory, PeerId, VisibilityLevel

logger = logging.getLogger(__name__)

DEFAULT_LEVEL = VisibilityLevel.NOBODY


@dataclass
class HydrationResult:
    """A hydrated setting plus the subtitles derived from it."""

    setting: PrivacySetting
    allow_summary: ExceptionSummary = field(default_factory=ExceptionSummary)
    disallow_summary: ExceptionSummary = field(default_factory=ExceptionSummary)

    def summary(self, category: ExceptionCategory) -> ExceptionSummary:
        if ExceptionCategory(category) is ExceptionCategory.ALLOW:
            return self.allow_summary
        return self.disallow_summary


def _as_rule(item: Any) -> Optional[PrivacyRule]:
    if isinstance(item, PrivacyRule):
        return item
    return PrivacyRule.from_dict(item)


def hydrate_rules(rules: Iterable[Any], *, with_exceptions: bool = True) -> HydrationResult:
    """Convert an ordered rule list into a :class:`PrivacySetting`.

    The first base rule decides the level (``NOBODY`` when there is none).
    Exception rules append to their list in the order they appear; chat ids
    are stored negated. Unrecognized entries are skipped.

    Args:
        rules: ``PrivacyRule`` instances or raw wire dicts
        with_exceptions: When False the setting carries no exception store
            and exception rules are ignored

    Returns:
        HydrationResult with the setting and per-category summaries
    """
    level: Optional[VisibilityLevel] = None
    peers: dict[ExceptionCategory, list[PeerId]] = {
        ExceptionCategory.ALLOW: [],
        ExceptionCategory.DISALLOW: [],
    }

    for item in rules:
        rule = _as_rule(item)
        if rule is None:
            logger.debug(f"Skipping unrecognized rule during hydration: {item!r}")
            continue

        if rule.kind in BASE_RULE_LEVEL:
            if level is None:
                level = BASE_RULE_LEVEL[rule.kind]
            continue

        target = EXCEPTION_RULE_TARGET.get(rule.kind)
        if target is None:
            logger.debug(f"Skipping rule with unrecognized kind during hydration: {rule.kind!r}")
            continue

        category, is_group = target
        if is_group:
            peers[category].extend(-chat_id for chat_id in rule.ids)
        else:
            peers[category].extend(rule.ids)

    level = level if level is not None else DEFAULT_LEVEL

    if not with_exceptions:
        return HydrationResult(setting=PrivacySetting(level=level))

    store = ExceptionStore(
        allow=peers[ExceptionCategory.ALLOW],
        disallow=peers[ExceptionCategory.DISALLOW],
        level=level,
    )
    return HydrationResult(
        setting=PrivacySetting(level=level, exceptions=store),
        allow_summary=store.summary(ExceptionCategory.ALLOW),
        disallow_summary=store.summary(ExceptionCategory.DISALLOW),
    )
