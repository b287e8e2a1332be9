# Parley Privacy Module
"""
Privacy-rule composition engine.

This module provides tools for:
- Peer classification: split signed peer ids into individuals and groups
- Hydration: turn a fetched rule list into an editable PrivacySetting
- Compilation: turn an edited PrivacySetting back into an ordered rule list
- Exception store: the live allow/disallow lists and their visibility
- Setting controller: one fetch → edit → commit session per privacy key
"""

from .types import (
    ExceptionCategory,
    ExceptionVisibility,
    PeerId,
    PrivacyKey,
    VISIBILITY_TABLE,
    VisibilityLevel,
    is_valid_peer_id,
    visibility_for,
)

from .rules import (
    PrivacyRule,
    RuleKind,
    decode_rules,
    encode_rules,
)

from .peers import PeerSplit, split_peers_by_type

from .store import (
    ExceptionStore,
    ExceptionSummary,
    PrivacySetting,
)

from .hydrator import HydrationResult, hydrate_rules
from .compiler import compile_rules
from .lifecycle import LifecycleSignal
from .picker import PeerPicker, StaticPeerPicker

from .controller import (
    ControllerState,
    SectionOptions,
    SettingController,
)

__all__ = [
    # Types
    "ExceptionCategory",
    "ExceptionVisibility",
    "PeerId",
    "PrivacyKey",
    "VISIBILITY_TABLE",
    "VisibilityLevel",
    "is_valid_peer_id",
    "visibility_for",
    # Wire rules
    "PrivacyRule",
    "RuleKind",
    "decode_rules",
    "encode_rules",
    # Engine
    "PeerSplit",
    "split_peers_by_type",
    "ExceptionStore",
    "ExceptionSummary",
    "PrivacySetting",
    "HydrationResult",
    "hydrate_rules",
    "compile_rules",
    # Session
    "LifecycleSignal",
    "PeerPicker",
    "StaticPeerPicker",
    "ControllerState",
    "SectionOptions",
    "SettingController",
]
