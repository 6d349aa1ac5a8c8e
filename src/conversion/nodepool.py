"""
NodePool conversion between karpenter.sh/v1 and karpenter.sh/v1beta1.

The two schemas are not isomorphic. Fields without a counterpart in the target
version travel in annotation side channels (see ``conversion.annotations``),
which are carriers only: they are stripped from every v1beta1 object produced
here.
"""

import copy
import logging
from typing import Sequence

from . import annotations, disruption, node_class_ref, template
from .errors import MalformedObjectError
from .template import expire_after_from_legacy, expire_after_to_legacy

logger = logging.getLogger(__name__)

V1_API_VERSION = "karpenter.sh/v1"
V1BETA1_API_VERSION = "karpenter.sh/v1beta1"


def convert_nodepool(
    obj: dict, desired_api_version: str, node_classes: Sequence = ()
) -> dict:
    current = obj.get("apiVersion")
    fn = _CONVERSIONS.get((current, desired_api_version))
    if fn is None:
        obj["apiVersion"] = desired_api_version
        return obj
    try:
        return fn(obj, node_classes)
    except (AttributeError, TypeError) as e:
        # A field of the wrong JSON type somewhere in the object.
        raise MalformedObjectError(
            f"malformed NodePool {_name_of(obj)!r}, {type(e).__name__}: {e}"
        ) from e


def convert_to_legacy(nodepool: dict) -> dict:
    """Return the v1beta1 form of a v1 NodePool."""
    legacy = _with_metadata(nodepool, V1BETA1_API_VERSION)
    legacy["spec"] = _spec_to_legacy(nodepool.get("spec") or {}, nodepool)
    _copy_status(nodepool, legacy)
    annotations.remove(legacy, *annotations.SIDE_CHANNEL_KEYS)
    return legacy


def convert_from_legacy(nodepool: dict, node_classes: Sequence) -> dict:
    """Return the v1 form of a v1beta1 NodePool.

    ``node_classes`` supplies the default kind and group for references that
    leave them blank; its first entry is used.
    """
    legacy_spec = nodepool.get("spec") or {}
    current = _with_metadata(nodepool, V1_API_VERSION)
    current["spec"], kubelet = _spec_from_legacy(legacy_spec, node_classes)
    _copy_status(nodepool, current)

    if kubelet is None:
        annotations.remove(current, annotations.KUBELET_COMPATIBILITY_ANNOTATION_KEY)
    else:
        annotations.put(
            current, annotations.KUBELET_COMPATIBILITY_ANNOTATION_KEY, kubelet
        )
    template_spec = (legacy_spec.get("template") or {}).get("spec") or {}
    node_class_ref.remember(template_spec.get("nodeClassRef"), current)
    return current


def convert_to(current: dict, legacy_target: dict):
    """Populate ``legacy_target`` in place from the v1 NodePool ``current``.

    ``legacy_target`` is only touched once the conversion has succeeded.
    """
    converted = convert_to_legacy(current)
    legacy_target.clear()
    legacy_target.update(converted)


def convert_from(current_target: dict, legacy: dict, node_classes: Sequence):
    """Populate ``current_target`` in place from the v1beta1 NodePool ``legacy``."""
    converted = convert_from_legacy(legacy, node_classes)
    current_target.clear()
    current_target.update(converted)


def _spec_to_legacy(spec: dict, holder: dict) -> dict:
    legacy = _copy_common(spec)
    legacy_disruption = disruption.to_legacy(spec.get("disruption") or {})
    expire_after_to_legacy(spec, legacy_disruption)
    if "disruption" in spec or legacy_disruption:
        legacy["disruption"] = legacy_disruption
    legacy["template"] = template.to_legacy(spec.get("template") or {}, holder)
    return legacy


def _spec_from_legacy(legacy_spec: dict, node_classes: Sequence):
    current = _copy_common(legacy_spec)
    if "disruption" in legacy_spec:
        current["disruption"] = disruption.from_legacy(
            legacy_spec["disruption"] or {}
        )
    current["template"], kubelet = template.from_legacy(
        legacy_spec.get("template") or {}, node_classes
    )
    expire_after_from_legacy(legacy_spec, current["template"]["spec"])
    return current, kubelet


def _name_of(obj: dict):
    metadata = obj.get("metadata")
    return metadata.get("name") if isinstance(metadata, dict) else None


def _copy_common(spec: dict) -> dict:
    return {k: copy.deepcopy(spec[k]) for k in ("weight", "limits") if k in spec}


def _with_metadata(obj: dict, api_version: str) -> dict:
    logger.info(
        "Converting NodePool %s %s → %s",
        (obj.get("metadata") or {}).get("name"),
        obj.get("apiVersion"),
        api_version,
    )
    return {
        "apiVersion": api_version,
        "kind": obj.get("kind", "NodePool"),
        "metadata": copy.deepcopy(obj.get("metadata") or {}),
    }


def _copy_status(source: dict, target: dict):
    status = source.get("status")
    if status is None:
        return
    target["status"] = {}
    if "resources" in status:
        target["status"]["resources"] = copy.deepcopy(status["resources"])


def _v1_to_v1beta1(obj: dict, node_classes: Sequence) -> dict:
    return convert_to_legacy(obj)


def _v1beta1_to_v1(obj: dict, node_classes: Sequence) -> dict:
    return convert_from_legacy(obj, node_classes)


_CONVERSIONS = {
    (V1_API_VERSION, V1BETA1_API_VERSION): _v1_to_v1beta1,
    (V1BETA1_API_VERSION, V1_API_VERSION): _v1beta1_to_v1,
}
