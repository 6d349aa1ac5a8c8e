"""Consolidation policy mapping between v1 and v1beta1 disruption blocks."""

import copy

WHEN_EMPTY = "WhenEmpty"
# v1 only. v1beta1 expresses the same behaviour as WhenUnderutilized.
WHEN_EMPTY_OR_UNDERUTILIZED = "WhenEmptyOrUnderutilized"
# v1beta1 only.
WHEN_UNDERUTILIZED = "WhenUnderutilized"

# v1 requires consolidateAfter to be set; zero means no extra wait.
ZERO_DURATION = "0s"


def to_legacy(disruption: dict) -> dict:
    legacy = {}
    policy = disruption.get("consolidationPolicy")
    if policy == WHEN_EMPTY_OR_UNDERUTILIZED:
        # consolidateAfter stays unset for WhenUnderutilized.
        legacy["consolidationPolicy"] = WHEN_UNDERUTILIZED
    else:
        if "consolidationPolicy" in disruption:
            legacy["consolidationPolicy"] = policy
        if "consolidateAfter" in disruption:
            legacy["consolidateAfter"] = disruption["consolidateAfter"]
    if "budgets" in disruption:
        legacy["budgets"] = copy.deepcopy(disruption["budgets"])
    return legacy


def from_legacy(disruption: dict) -> dict:
    current = {}
    policy = disruption.get("consolidationPolicy")
    if policy == WHEN_UNDERUTILIZED:
        current["consolidationPolicy"] = WHEN_EMPTY_OR_UNDERUTILIZED
        current["consolidateAfter"] = ZERO_DURATION
    else:
        if "consolidationPolicy" in disruption:
            current["consolidationPolicy"] = policy
        if "consolidateAfter" in disruption:
            current["consolidateAfter"] = disruption["consolidateAfter"]
    if "budgets" in disruption:
        current["budgets"] = copy.deepcopy(disruption["budgets"])
    return current
