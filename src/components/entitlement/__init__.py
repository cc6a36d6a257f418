"""
Entitlement component.

Public API for post visibility and paywall decisions.
"""

from .component import (
    get_paywall_info,
    is_fully_locked,
    load_config_from_rules,
    locked_state,
    resolve,
    run,
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

__all__ = [
    # Functions
    "resolve",
    "is_fully_locked",
    "locked_state",
    "get_paywall_info",
    "load_config_from_rules",
    "run",
    # Models
    "CallToAction",
    "EntitlementConfig",
    "EntitlementReason",
    "EntitlementResult",
    "EntitlementState",
    "ResolveByIdInput",
    "ResolveInput",
    "ResolveOutput",
    "DEFAULT_SUBSCRIPTION_UNLOCKS",
    "subscription_covers",
    # Ports
    "EntitlementStorePort",
]
