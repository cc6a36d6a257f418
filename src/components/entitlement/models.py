"""
Entitlement component models.

Data models for deciding whether a viewer sees a post in full.

Invariants: free posts are visible to everyone, owners always see their own
posts, anything ambiguous resolves to a locked state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from src.domain.entities import Post, PostVisibility, ViewerContext

# --- Result Types ---


class EntitlementState(str, Enum):
    """Visibility of a post's media for one viewer."""

    UNLOCKED = "UNLOCKED"
    LOCKED_PREVIEW = "LOCKED_PREVIEW"
    LOCKED_NO_PREVIEW = "LOCKED_NO_PREVIEW"


class EntitlementReason(str, Enum):
    """Which rule decided the state."""

    FREE = "FREE"
    ANONYMOUS = "ANONYMOUS"
    OWNER = "OWNER"
    SUBSCRIBED = "SUBSCRIBED"
    PURCHASED = "PURCHASED"
    NOT_SUBSCRIBED = "NOT_SUBSCRIBED"


class CallToAction(str, Enum):
    """What the paywall card should ask the viewer to do."""

    NONE = "NONE"
    SIGN_IN = "SIGN_IN"
    SUBSCRIBE = "SUBSCRIBE"
    PURCHASE = "PURCHASE"


@dataclass(frozen=True)
class EntitlementResult:
    """Output of resolve()."""

    state: EntitlementState
    reason: EntitlementReason
    cta: CallToAction = CallToAction.NONE

    @property
    def is_unlocked(self) -> bool:
        return self.state is EntitlementState.UNLOCKED

    @property
    def is_locked(self) -> bool:
        return not self.is_unlocked


# --- Inputs ---


@dataclass(frozen=True)
class ResolveInput:
    """Resolve against snapshots already in hand."""

    viewer: ViewerContext
    post: Post


@dataclass(frozen=True)
class ResolveByIdInput:
    """Resolve by fetching snapshots from a store."""

    post_id: str
    viewer_id: str | None = None


@dataclass(frozen=True)
class ResolveOutput:
    """Output from run()."""

    result: EntitlementResult | None
    post_id: str | None = None
    errors: list[str] = field(default_factory=list)
    success: bool = True


# --- Configuration ---

# Tiers a plain subscription unlocks unless rules narrow it
DEFAULT_SUBSCRIPTION_UNLOCKS: frozenset[PostVisibility] = frozenset(
    {"subscribers", "vip", "premium"}
)


@dataclass(frozen=True)
class EntitlementConfig:
    """Entitlement configuration from rules."""

    subscription_unlocks: frozenset[PostVisibility] = DEFAULT_SUBSCRIPTION_UNLOCKS
    allow_pay_per_view: bool = True


def subscription_covers(tier: PostVisibility, config: EntitlementConfig) -> bool:
    """Check if a subscription to the creator unlocks this tier."""
    return tier in config.subscription_unlocks
