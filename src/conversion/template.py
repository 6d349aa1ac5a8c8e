"""NodeClaim template conversion between v1 and v1beta1 NodePools."""

import copy
from typing import Optional, Sequence, Tuple

from . import annotations, node_class_ref

_REQUIREMENT_FIELDS = ("key", "operator", "values")
_VERBATIM_FIELDS = ("taints", "startupTaints")


def to_legacy(template: dict, holder: dict) -> dict:
    """Convert a v1 template, reading side channels from ``holder``.

    terminationGracePeriod has no v1beta1 counterpart and is dropped, as is
    minValues on every requirement.
    """
    spec = template.get("spec") or {}
    legacy_spec = _copy_verbatim(spec)
    if "requirements" in spec:
        legacy_spec["requirements"] = [
            _copy_requirement(r) for r in spec["requirements"]
        ]
    ref = node_class_ref.to_legacy(spec.get("nodeClassRef"), holder)
    if ref is not None:
        legacy_spec["nodeClassRef"] = ref
    kubelet = annotations.load_json(
        holder, annotations.KUBELET_COMPATIBILITY_ANNOTATION_KEY
    )
    if kubelet is not None:
        legacy_spec["kubelet"] = kubelet
    return _with_metadata(template, legacy_spec)


def from_legacy(
    template: dict, node_classes: Sequence
) -> Tuple[dict, Optional[str]]:
    """Convert a v1beta1 template.

    Returns the v1 template and the encoded kubelet block, or None when the
    template has no kubelet and any stale annotation should be removed.
    """
    spec = template.get("spec") or {}
    current_spec = _copy_verbatim(spec)
    if "requirements" in spec:
        # minValues is left unset.
        current_spec["requirements"] = [
            _copy_requirement(r) for r in spec["requirements"]
        ]
    if spec.get("nodeClassRef") is not None:
        current_spec["nodeClassRef"] = node_class_ref.from_legacy(
            spec["nodeClassRef"], node_classes
        )
    kubelet = None
    if spec.get("kubelet") is not None:
        kubelet = annotations.encode(spec["kubelet"])
    return _with_metadata(template, current_spec), kubelet


def expire_after_to_legacy(spec: dict, legacy_disruption: dict):
    # v1 keeps expireAfter on the template, v1beta1 under disruption.
    template_spec = (spec.get("template") or {}).get("spec") or {}
    if "expireAfter" in template_spec:
        legacy_disruption["expireAfter"] = template_spec["expireAfter"]


def expire_after_from_legacy(legacy_spec: dict, template_spec: dict):
    disruption = legacy_spec.get("disruption") or {}
    if "expireAfter" in disruption:
        template_spec["expireAfter"] = disruption["expireAfter"]


def _copy_verbatim(spec: dict) -> dict:
    return {
        k: copy.deepcopy(spec[k]) for k in _VERBATIM_FIELDS if k in spec
    }


def _copy_requirement(requirement: dict) -> dict:
    return {
        k: copy.deepcopy(requirement[k])
        for k in _REQUIREMENT_FIELDS
        if k in requirement
    }


def _with_metadata(template: dict, spec: dict) -> dict:
    converted = {}
    if "metadata" in template:
        converted["metadata"] = copy.deepcopy(template["metadata"])
    converted["spec"] = spec
    return converted
