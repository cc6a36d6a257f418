"""
Entitlement component.

Pure functions deciding whether a post's media is visible to a viewer.

Checks run in a fixed order and the first match wins:
free, anonymous, owner, subscribed, purchased, otherwise locked.
"""

from __future__ import annotations

from typing import Any

from src.domain.entities import (
    VISIBILITY_VALUES,
    AnonymousViewer,
    AuthenticatedViewer,
    Post,
    PostVisibility,
    ViewerContext,
)

from .models import (
    DEFAULT_SUBSCRIPTION_UNLOCKS,
    CallToAction,
    EntitlementConfig,
    EntitlementReason,
    EntitlementResult,
    EntitlementState,
    ResolveByIdInput,
    ResolveInput,
    ResolveOutput,
    subscription_covers,
)
from .ports import EntitlementStorePort

# --- Pure Functions ---


def locked_state(post: Post) -> EntitlementState:
    """Locked state for a post: preview only when a thumbnail exists."""
    if post.has_preview:
        return EntitlementState.LOCKED_PREVIEW
    return EntitlementState.LOCKED_NO_PREVIEW


def _locked(post: Post, reason: EntitlementReason, cta: CallToAction) -> EntitlementResult:
    return EntitlementResult(state=locked_state(post), reason=reason, cta=cta)


def _unlocked(reason: EntitlementReason) -> EntitlementResult:
    return EntitlementResult(state=EntitlementState.UNLOCKED, reason=reason)


def resolve(
    viewer: ViewerContext,
    post: Post,
    config: EntitlementConfig | None = None,
) -> EntitlementResult:
    """
    Resolve a viewer's entitlement to a post.

    Pure function, no I/O.

    Args:
        viewer: AnonymousViewer or AuthenticatedViewer snapshot
        post: Post snapshot
        config: Optional entitlement config

    Returns:
        EntitlementResult with state, reason and call-to-action
    """
    config = config or EntitlementConfig()

    if post.visibility == "free":
        return _unlocked(EntitlementReason.FREE)

    if isinstance(viewer, AnonymousViewer):
        return _locked(post, EntitlementReason.ANONYMOUS, CallToAction.SIGN_IN)

    if not isinstance(viewer, AuthenticatedViewer):
        # Unknown viewer shape
        return _locked(post, EntitlementReason.ANONYMOUS, CallToAction.SIGN_IN)

    if viewer.id == post.creator_id:
        return _unlocked(EntitlementReason.OWNER)

    if post.creator_id in viewer.subscribed_creator_ids and subscription_covers(
        post.visibility, config
    ):
        return _unlocked(EntitlementReason.SUBSCRIBED)

    if config.allow_pay_per_view and post.id in viewer.purchased_post_ids:
        return _unlocked(EntitlementReason.PURCHASED)

    cta = CallToAction.SUBSCRIBE
    if config.allow_pay_per_view and post.price is not None and post.price > 0:
        cta = CallToAction.PURCHASE

    return _locked(post, EntitlementReason.NOT_SUBSCRIBED, cta)


def is_fully_locked(
    viewer: ViewerContext,
    post: Post,
    config: EntitlementConfig | None = None,
) -> bool:
    """True when the viewer would get no preview at all."""
    return resolve(viewer, post, config).state is EntitlementState.LOCKED_NO_PREVIEW


def get_paywall_info(
    viewer: ViewerContext,
    post: Post,
    config: EntitlementConfig | None = None,
) -> dict[str, Any]:
    """
    Get paywall display information for the presentation layer.

    Never includes media URLs for locked posts.
    """
    result = resolve(viewer, post, config)

    return {
        "post_id": post.id,
        "creator_id": post.creator_id,
        "visibility": post.visibility,
        "state": result.state.value,
        "reason": result.reason.value,
        "cta": result.cta.value,
        "show_paywall": result.is_locked,
        "thumbnail_url": post.thumbnail_url
        if result.state is not EntitlementState.LOCKED_NO_PREVIEW
        else None,
        "price": post.price if result.cta is CallToAction.PURCHASE else None,
    }


# --- Run Function (Atomic Component Pattern) ---


def run(
    input_data: ResolveInput | ResolveByIdInput,
    config: EntitlementConfig | None = None,
    store: EntitlementStorePort | None = None,
) -> ResolveOutput:
    """
    Run an entitlement resolution based on input type.

    Args:
        input_data: Snapshots, or ids to fetch from the store
        config: Entitlement configuration
        store: Required for ResolveByIdInput

    Returns:
        ResolveOutput with the result or errors
    """
    config = config or EntitlementConfig()

    if isinstance(input_data, ResolveInput):
        return ResolveOutput(
            result=resolve(input_data.viewer, input_data.post, config),
            post_id=input_data.post.id,
        )

    if isinstance(input_data, ResolveByIdInput):
        if store is None:
            return ResolveOutput(
                result=None,
                post_id=input_data.post_id,
                errors=["No snapshot store configured"],
                success=False,
            )

        post = store.get_post(input_data.post_id)
        if post is None:
            return ResolveOutput(
                result=None,
                post_id=input_data.post_id,
                errors=[f"Post not found: {input_data.post_id}"],
                success=False,
            )

        viewer = store.get_viewer_snapshot(input_data.viewer_id)
        return ResolveOutput(result=resolve(viewer, post, config), post_id=post.id)

    raise TypeError(f"Unknown input type: {type(input_data)}")


# --- Configuration Loader ---


def load_config_from_rules(rules: dict[str, Any]) -> EntitlementConfig:
    """
    Load EntitlementConfig from rules.yaml.

    Unknown tier names are dropped; "free" never needs a subscription.

    Args:
        rules: Parsed rules dictionary

    Returns:
        EntitlementConfig instance
    """
    entitlements = rules.get("entitlements") or {}

    raw_unlocks = entitlements.get("subscription_unlocks")
    unlocks: frozenset[PostVisibility] = DEFAULT_SUBSCRIPTION_UNLOCKS
    if isinstance(raw_unlocks, (list, tuple, set, frozenset)):
        unlocks = frozenset(
            tier for tier in raw_unlocks if tier in VISIBILITY_VALUES and tier != "free"
        )

    return EntitlementConfig(
        subscription_unlocks=unlocks,
        allow_pay_per_view=entitlements.get("allow_pay_per_view", True) is not False,
    )
