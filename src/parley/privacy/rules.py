"""
Wire format for privacy rules.

A rule list is an ordered sequence of tagged variants:

    allow_all | disallow_all | allow_contacts
    allow_users{users} | allow_chats{chats}
    disallow_users{users} | disallow_chats{chats}

Identifiers on the wire are unsigned; the signed peer-id convention only
exists on the engine side of the hydrator/compiler boundary. Unknown tags are
dropped on decode so that newer servers do not break older clients.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Optional

from .types import ExceptionCategory, VisibilityLevel

logger = logging.getLogger(__name__)

TAG_FIELD = "_"


class RuleKind(StrEnum):
    """Tag of a wire rule."""

    ALLOW_ALL = "allow_all"
    DISALLOW_ALL = "disallow_all"
    ALLOW_CONTACTS = "allow_contacts"
    ALLOW_USERS = "allow_users"
    ALLOW_CHATS = "allow_chats"
    DISALLOW_USERS = "disallow_users"
    DISALLOW_CHATS = "disallow_chats"


# Name of the id payload field per kind; None for base rules.
PAYLOAD_FIELD: dict[RuleKind, Optional[str]] = {
    RuleKind.ALLOW_ALL: None,
    RuleKind.DISALLOW_ALL: None,
    RuleKind.ALLOW_CONTACTS: None,
    RuleKind.ALLOW_USERS: "users",
    RuleKind.ALLOW_CHATS: "chats",
    RuleKind.DISALLOW_USERS: "users",
    RuleKind.DISALLOW_CHATS: "chats",
}

BASE_RULE_LEVEL: dict[RuleKind, VisibilityLevel] = {
    RuleKind.ALLOW_ALL: VisibilityLevel.EVERYBODY,
    RuleKind.ALLOW_CONTACTS: VisibilityLevel.CONTACTS,
    RuleKind.DISALLOW_ALL: VisibilityLevel.NOBODY,
}

LEVEL_BASE_RULE: dict[VisibilityLevel, RuleKind] = {
    level: kind for kind, level in BASE_RULE_LEVEL.items()
}

# (category, is_group) for every exception kind.
EXCEPTION_RULE_TARGET: dict[RuleKind, tuple[ExceptionCategory, bool]] = {
    RuleKind.ALLOW_USERS: (ExceptionCategory.ALLOW, False),
    RuleKind.ALLOW_CHATS: (ExceptionCategory.ALLOW, True),
    RuleKind.DISALLOW_USERS: (ExceptionCategory.DISALLOW, False),
    RuleKind.DISALLOW_CHATS: (ExceptionCategory.DISALLOW, True),
}

# category -> (chats kind, users kind); chats are emitted first.
CATEGORY_RULE_KINDS: dict[ExceptionCategory, tuple[RuleKind, RuleKind]] = {
    ExceptionCategory.ALLOW: (RuleKind.ALLOW_CHATS, RuleKind.ALLOW_USERS),
    ExceptionCategory.DISALLOW: (RuleKind.DISALLOW_CHATS, RuleKind.DISALLOW_USERS),
}


def _is_wire_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class PrivacyRule:
    """
    One rule of a privacy rule list.

    Attributes:
        kind: The variant tag. Tags outside :class:`RuleKind` are kept as
            plain strings and ignored by the hydrator.
        ids: Unsigned user or chat ids, empty for base rules. Ids that are
            not positive integers are dropped on construction.
    """

    kind: RuleKind
    ids: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "kind", RuleKind(self.kind))
        except ValueError:
            pass
        ids = tuple(self.ids)
        valid = tuple(i for i in ids if _is_wire_id(i))
        if len(valid) != len(ids):
            logger.debug(f"Dropping {len(ids) - len(valid)} invalid ids from {self.kind} rule")
        object.__setattr__(self, "ids", valid)

    @property
    def is_known(self) -> bool:
        return isinstance(self.kind, RuleKind)

    @property
    def is_base(self) -> bool:
        return self.kind in BASE_RULE_LEVEL

    # Constructors -----------------------------------------------------------

    @classmethod
    def allow_all(cls) -> "PrivacyRule":
        return cls(RuleKind.ALLOW_ALL)

    @classmethod
    def disallow_all(cls) -> "PrivacyRule":
        return cls(RuleKind.DISALLOW_ALL)

    @classmethod
    def allow_contacts(cls) -> "PrivacyRule":
        return cls(RuleKind.ALLOW_CONTACTS)

    @classmethod
    def allow_users(cls, users: Iterable[int]) -> "PrivacyRule":
        return cls(RuleKind.ALLOW_USERS, tuple(users))

    @classmethod
    def allow_chats(cls, chats: Iterable[int]) -> "PrivacyRule":
        return cls(RuleKind.ALLOW_CHATS, tuple(chats))

    @classmethod
    def disallow_users(cls, users: Iterable[int]) -> "PrivacyRule":
        return cls(RuleKind.DISALLOW_USERS, tuple(users))

    @classmethod
    def disallow_chats(cls, chats: Iterable[int]) -> "PrivacyRule":
        return cls(RuleKind.DISALLOW_CHATS, tuple(chats))

    # Serialization ----------------------------------------------------------

    def to_dict(self) -> dict:
        """Serialize to dict for transmission."""
        data: dict[str, Any] = {TAG_FIELD: str(self.kind)}
        payload_field = PAYLOAD_FIELD.get(self.kind)
        if payload_field is not None:
            data[payload_field] = list(self.ids)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Optional["PrivacyRule"]:
        """Deserialize from dict.

        Returns None for anything that is not a recognized rule. Ids that are
        not positive integers are dropped.
        """
        if not isinstance(data, Mapping):
            return None
        try:
            kind = RuleKind(data.get(TAG_FIELD))
        except ValueError:
            return None

        payload_field = PAYLOAD_FIELD[kind]
        if payload_field is None:
            return cls(kind)

        raw_ids = data.get(payload_field) or []
        if not isinstance(raw_ids, (list, tuple)):
            return cls(kind)
        return cls(kind, tuple(raw_ids))


def encode_rules(rules: Iterable[PrivacyRule]) -> list[dict]:
    """Serialize a rule list, preserving order."""
    return [rule.to_dict() for rule in rules]


def decode_rules(payload: Any) -> list[PrivacyRule]:
    """Deserialize a rule list, skipping entries that are not recognized."""
    if not isinstance(payload, (list, tuple)):
        logger.debug(f"Ignoring non-list rule payload of type {type(payload).__name__}")
        return []

    rules: list[PrivacyRule] = []
    for item in payload:
        rule = PrivacyRule.from_dict(item)
        if rule is None:
            logger.debug(f"Ignoring unrecognized privacy rule: {item!r}")
            continue
        rules.append(rule)
    return rules
