"""
nodeClassRef conversion.

v1 references name their node class by ``group``; v1beta1 references carry a
combined ``apiVersion`` and may leave ``kind`` and ``apiVersion`` blank, in
which case v1 falls back to the cluster's default node class. Since that
defaulting cannot be undone by looking at the v1 object, the exact v1beta1
reference is kept in an annotation and restored verbatim on the way back.
"""

import logging
from typing import Optional, Sequence

from . import annotations
from .errors import MissingDefaultError

logger = logging.getLogger(__name__)


def to_legacy(ref: Optional[dict], holder: dict) -> Optional[dict]:
    """Build the v1beta1 reference for a v1 ``ref`` found on ``holder``.

    Returns None when there is neither a reference nor a stored one.
    """
    stored = annotations.load_json(
        holder, annotations.NODE_CLASS_REFERENCE_ANNOTATION_KEY
    )
    if stored is not None:
        return stored
    if ref is None:
        return None
    return {k: ref[k] for k in ("name", "kind") if k in ref}


def remember(ref: Optional[dict], holder: dict) -> dict:
    """Record the exact v1beta1 reference on the v1 ``holder``.

    Done on every conversion, even when kind and apiVersion are explicit;
    a later change of the default node class must not alter the reference
    on a round trip. A missing reference clears any stale annotation.
    """
    if ref is None:
        return annotations.remove(
            holder, annotations.NODE_CLASS_REFERENCE_ANNOTATION_KEY
        )
    return annotations.store(
        holder, annotations.NODE_CLASS_REFERENCE_ANNOTATION_KEY, ref
    )


def from_legacy(ref: Optional[dict], node_classes: Sequence) -> dict:
    ref = ref or {}
    current = {}
    if "name" in ref:
        current["name"] = ref["name"]

    kind = ref.get("kind") or ""
    current["kind"] = kind if kind else _default_node_class(node_classes).kind

    api_version = ref.get("apiVersion") or ""
    if api_version:
        current["group"] = api_version.split("/")[0]
    else:
        current["group"] = _default_node_class(node_classes).group
    return current


def _default_node_class(node_classes: Sequence):
    if not node_classes:
        raise MissingDefaultError(
            "nodeClassRef has no kind or apiVersion and no default node class "
            "is configured"
        )
    default = node_classes[0]
    logger.debug(
        "Defaulting nodeClassRef to %s.%s", default.kind, default.group
    )
    return default
