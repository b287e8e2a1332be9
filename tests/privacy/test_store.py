"""Tests for the exception store and privacy setting."""

from __future__ import annotations

import pytest

from parley.core.exceptions import ValidationException
from parley.privacy.store import ExceptionStore, ExceptionSummary, PrivacySetting
from parley.privacy.types import (
    VISIBILITY_TABLE,
    ExceptionCategory,
    ExceptionVisibility,
    PrivacyKey,
    VisibilityLevel,
)


class TestVisibilityTable:
    def test_table_is_total(self) -> None:
        assert set(VISIBILITY_TABLE) == set(VisibilityLevel)

    @pytest.mark.parametrize(
        "level,allow,disallow",
        [
            (VisibilityLevel.EVERYBODY, True, False),
            (VisibilityLevel.CONTACTS, True, True),
            (VisibilityLevel.NOBODY, False, True),
        ],
    )
    def test_store_flags(self, level, allow, disallow) -> None:
        store = ExceptionStore(level=level)
        assert store.visible == ExceptionVisibility(allow=allow, disallow=disallow)
        assert store.is_visible(ExceptionCategory.ALLOW) is allow
        assert store.is_visible(ExceptionCategory.DISALLOW) is disallow

    def test_visibility_indexing(self) -> None:
        visibility = ExceptionVisibility(allow=True, disallow=False)
        assert visibility[ExceptionCategory.ALLOW] is True
        assert visibility[ExceptionCategory.DISALLOW] is False


class TestExceptionStore:
    def test_initial_lists(self) -> None:
        store = ExceptionStore(allow=[1, -2], disallow=[3])
        assert store.allow == [1, -2]
        assert store.disallow == [3]

    def test_peers_returns_copy(self) -> None:
        store = ExceptionStore(allow=[1])
        store.peers(ExceptionCategory.ALLOW).append(99)
        assert store.allow == [1]

    def test_replace_is_full_replacement(self) -> None:
        store = ExceptionStore(allow=[1, 2, 3])
        store.replace(ExceptionCategory.ALLOW, [4])
        assert store.allow == [4]

    def test_replace_with_empty(self) -> None:
        store = ExceptionStore(disallow=[1])
        store.replace(ExceptionCategory.DISALLOW, [])
        assert store.disallow == []

    def test_replace_accepts_category_string(self) -> None:
        store = ExceptionStore()
        store.replace("disallow", [5])
        assert store.disallow == [5]

    def test_replace_keeps_duplicates(self) -> None:
        store = ExceptionStore()
        store.replace(ExceptionCategory.ALLOW, [1, 1, -1])
        assert store.allow == [1, 1, -1]

    def test_replace_rejects_zero(self) -> None:
        store = ExceptionStore(allow=[1])
        with pytest.raises(ValidationException):
            store.replace(ExceptionCategory.ALLOW, [2, 0])
        assert store.allow == [1]

    def test_replace_notifies_listeners(self) -> None:
        store = ExceptionStore()
        seen = []
        store.on_change(lambda category, summary: seen.append((category, summary)))

        summary = store.replace(ExceptionCategory.ALLOW, [1, 2, -3])

        assert summary == ExceptionSummary(individuals=2, groups=1)
        assert seen == [(ExceptionCategory.ALLOW, summary)]

    def test_unsubscribe(self) -> None:
        store = ExceptionStore()
        seen = []
        unsubscribe = store.on_change(lambda *args: seen.append(args))
        unsubscribe()
        unsubscribe()
        store.replace(ExceptionCategory.ALLOW, [1])
        assert seen == []

    def test_apply_level_keeps_content(self) -> None:
        store = ExceptionStore(allow=[1], level=VisibilityLevel.CONTACTS)
        store.apply_level(VisibilityLevel.NOBODY)
        assert store.is_visible(ExceptionCategory.ALLOW) is False
        assert store.allow == [1]

    def test_repr(self) -> None:
        assert "allow=[1]" in repr(ExceptionStore(allow=[1]))


class TestExceptionSummary:
    def test_empty(self) -> None:
        summary = ExceptionSummary()
        assert summary.is_empty
        assert summary.describe() == "Add Users"

    def test_users_only(self) -> None:
        assert ExceptionSummary(individuals=1).describe() == "1 user"
        assert ExceptionSummary(individuals=3).describe() == "3 users"

    def test_users_and_chats(self) -> None:
        assert ExceptionSummary(individuals=2, groups=1).describe() == "2 users, 1 chat"

    def test_chats_only(self) -> None:
        assert ExceptionSummary(groups=4).describe() == "4 chats"

    def test_custom_translate(self) -> None:
        calls = []

        def translate(key: str, count: int) -> str:
            calls.append((key, count))
            return f"{key}:{count}"

        assert ExceptionSummary(individuals=2, groups=5).describe(translate) == "users:2, chats:5"
        assert calls == [("users", 2), ("chats", 5)]


class TestPrivacySetting:
    def test_defaults(self) -> None:
        setting = PrivacySetting()
        assert setting.level is VisibilityLevel.NOBODY
        assert setting.exceptions is None
        assert setting.visible == ExceptionVisibility(allow=False, disallow=False)

    def test_init_aligns_store(self) -> None:
        store = ExceptionStore(level=VisibilityLevel.NOBODY)
        setting = PrivacySetting(level=VisibilityLevel.EVERYBODY, exceptions=store)
        assert setting.visible == ExceptionVisibility(allow=True, disallow=False)

    def test_set_level_recomputes_visibility(self) -> None:
        setting = PrivacySetting(level=VisibilityLevel.CONTACTS, exceptions=ExceptionStore())
        setting.set_level(VisibilityLevel.NOBODY)
        assert setting.level is VisibilityLevel.NOBODY
        assert setting.visible == ExceptionVisibility(allow=False, disallow=True)

    def test_assigning_level_recomputes_visibility(self) -> None:
        setting = PrivacySetting(level=VisibilityLevel.NOBODY, exceptions=ExceptionStore(allow=[1]))
        setting.level = VisibilityLevel.EVERYBODY
        assert setting.visible == ExceptionVisibility(allow=True, disallow=False)

    def test_assigning_level_parses_names(self) -> None:
        setting = PrivacySetting()
        setting.level = "contacts"
        assert setting.level is VisibilityLevel.CONTACTS


class TestParsing:
    def test_level_parse(self) -> None:
        assert VisibilityLevel.parse("contacts") is VisibilityLevel.CONTACTS
        assert VisibilityLevel.parse(" Everybody ") is VisibilityLevel.EVERYBODY
        assert VisibilityLevel.parse(2) is VisibilityLevel.NOBODY
        assert VisibilityLevel.parse(VisibilityLevel.NOBODY) is VisibilityLevel.NOBODY

    @pytest.mark.parametrize("value", ["friends", 7, ""])
    def test_level_parse_rejects(self, value) -> None:
        with pytest.raises(ValidationException):
            VisibilityLevel.parse(value)

    def test_privacy_key_parse(self) -> None:
        assert PrivacyKey.parse("phone-number") is PrivacyKey.PHONE_NUMBER
        assert PrivacyKey.parse(" FORWARDS ") is PrivacyKey.FORWARDS
        assert PrivacyKey.parse(PrivacyKey.CHAT_INVITE) is PrivacyKey.CHAT_INVITE

    def test_privacy_key_parse_rejects(self) -> None:
        with pytest.raises(ValidationException):
            PrivacyKey.parse("shoe_size")
