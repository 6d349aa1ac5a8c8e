"""
Annotation side channel for NodePool conversion.

Fields that have no home in the target schema are stashed as JSON blobs under
well-known annotation keys on the v1 object so that a later conversion back to
v1beta1 can restore them exactly. Whether a key is present, not what it
contains, decides whether the side channel is used.
"""

import json
from typing import Optional, Tuple

from .errors import EncodingError

# The v1beta1 kubelet block, which v1 NodePools no longer carry.
KUBELET_COMPATIBILITY_ANNOTATION_KEY = (
    "compatibility.karpenter.sh/v1beta1-kubelet-conversion"
)
# The exact v1beta1 nodeClassRef, before kind/group defaulting.
NODE_CLASS_REFERENCE_ANNOTATION_KEY = (
    "compatibility.karpenter.sh/v1beta1-nodeclass-reference"
)

SIDE_CHANNEL_KEYS = (
    KUBELET_COMPATIBILITY_ANNOTATION_KEY,
    NODE_CLASS_REFERENCE_ANNOTATION_KEY,
)


def encode(value) -> str:
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"marshaling annotation value, {e}") from e


def decode(key: str, raw: str) -> dict:
    try:
        value = json.loads(raw)
    except ValueError as e:
        raise EncodingError(f"unmarshaling {key} annotation, {e}") from e
    if not isinstance(value, dict):
        raise EncodingError(
            f"unmarshaling {key} annotation, expected a JSON object, "
            f"got {type(value).__name__}"
        )
    return value


def get_annotations(holder: dict) -> dict:
    return (holder.get("metadata") or {}).get("annotations") or {}


def put(holder: dict, key: str, raw: str) -> dict:
    """Set an already encoded blob and return the updated annotations."""
    metadata = holder.setdefault("metadata", {})
    annotations = dict(metadata.get("annotations") or {})
    annotations[key] = raw
    metadata["annotations"] = annotations
    return annotations


def store(holder: dict, key: str, value) -> dict:
    return put(holder, key, encode(value))


def load(holder: dict, key: str) -> Tuple[str, bool]:
    annotations = get_annotations(holder)
    if key not in annotations:
        return "", False
    return annotations[key], True


def load_json(holder: dict, key: str) -> Optional[dict]:
    """Decode the blob under ``key``, or return None if there is none."""
    raw, present = load(holder, key)
    if not present:
        return None
    return decode(key, raw)


def remove(holder: dict, *keys: str) -> dict:
    """Drop ``keys`` from the annotations.

    An annotation map left empty is removed from the metadata altogether, as
    the API server would omit it on the wire.
    """
    metadata = holder.get("metadata")
    if not metadata or not metadata.get("annotations"):
        return {}
    annotations = {
        k: v for k, v in metadata["annotations"].items() if k not in keys
    }
    if annotations:
        metadata["annotations"] = annotations
    else:
        metadata.pop("annotations", None)
    return annotations
