"""Compile a PrivacySetting back into an ordered rule list."""

from __future__ import annotations

from .peers import split_peers_by_type
from .rules import CATEGORY_RULE_KINDS, LEVEL_BASE_RULE, PrivacyRule
from .store import PrivacySetting
from .types import ExceptionCategory

# Allow rules always precede disallow rules.
CATEGORY_ORDER = (ExceptionCategory.ALLOW, ExceptionCategory.DISALLOW)


def compile_rules(setting: PrivacySetting) -> list[PrivacyRule]:
    """Build the wire rules for ``setting``.

    Output order is fixed and significant to the server:

        [base, allow_chats?, allow_users?, disallow_chats?, disallow_users?]

    A category is only emitted while its visibility flag is set, even if its
    list is populated. Empty partitions produce no rule.
    """
    rules = [PrivacyRule(LEVEL_BASE_RULE[setting.level])]

    store = setting.exceptions
    if store is None:
        return rules

    for category in CATEGORY_ORDER:
        if not store.is_visible(category):
            continue

        split = split_peers_by_type(store.peers(category))
        chats_kind, users_kind = CATEGORY_RULE_KINDS[category]
        if split.groups:
            rules.append(PrivacyRule(chats_kind, tuple(split.groups)))
        if split.individuals:
            rules.append(PrivacyRule(users_kind, tuple(split.individuals)))

    return rules
