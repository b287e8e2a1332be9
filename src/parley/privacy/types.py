# Parley Privacy Types
"""
Common types used across the privacy module.

Peer identifiers are signed integers: positive ids are individual accounts,
negative ids are groups (the absolute value is the group id). Zero is never a
valid peer id.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum

from ..core.exceptions import ValidationException

PeerId = int


def is_valid_peer_id(peer_id: object) -> bool:
    """True for non-zero ints (bools excluded)."""
    return isinstance(peer_id, int) and not isinstance(peer_id, bool) and peer_id != 0


def is_group(peer_id: PeerId) -> bool:
    return peer_id < 0


class VisibilityLevel(Enum):
    """Base visibility rule, applied before exceptions."""

    EVERYBODY = 0
    CONTACTS = 1
    NOBODY = 2

    @classmethod
    def parse(cls, value: str | int | VisibilityLevel) -> VisibilityLevel:
        """Accept a member, its numeric value or its (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValidationException("Unknown visibility level", field="level", value=value) from None
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValidationException("Unknown visibility level", field="level", value=value) from None


class ExceptionCategory(StrEnum):
    """The two per-setting exception lists."""

    ALLOW = "allow"
    DISALLOW = "disallow"


class PrivacyKey(StrEnum):
    """Server-side privacy setting a section edits."""

    STATUS_TIMESTAMP = "status_timestamp"
    CHAT_INVITE = "chat_invite"
    PHONE_CALL = "phone_call"
    PHONE_P2P = "phone_p2p"
    FORWARDS = "forwards"
    PROFILE_PHOTO = "profile_photo"
    PHONE_NUMBER = "phone_number"
    ADDED_BY_PHONE = "added_by_phone"

    @classmethod
    def parse(cls, value: str | PrivacyKey) -> PrivacyKey:
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            raise ValidationException("Unknown privacy key", field="key", value=value) from None


@dataclass(frozen=True)
class ExceptionVisibility:
    """Whether each exception list is currently eligible for compilation."""

    allow: bool
    disallow: bool

    def __getitem__(self, category: ExceptionCategory) -> bool:
        return self.allow if ExceptionCategory(category) is ExceptionCategory.ALLOW else self.disallow


# A hidden list keeps its contents but is left out of the compiled rules.
VISIBILITY_TABLE: dict[VisibilityLevel, ExceptionVisibility] = {
    VisibilityLevel.EVERYBODY: ExceptionVisibility(allow=True, disallow=False),
    VisibilityLevel.CONTACTS: ExceptionVisibility(allow=True, disallow=True),
    VisibilityLevel.NOBODY: ExceptionVisibility(allow=False, disallow=True),
}


def visibility_for(level: VisibilityLevel) -> ExceptionVisibility:
    return VISIBILITY_TABLE[level]
