"""
Default node class registry.

NodePools written against v1beta1 may leave ``nodeClassRef.kind`` and
``nodeClassRef.apiVersion`` blank. Converting them to v1 fills those in from
the cluster's default node classes, read once at operator startup from
/etc/karpenter/node-classes.yaml (mounted from the node-classes ConfigMap).

The file is either a list of entries or a mapping with a ``nodeClasses`` list:

    nodeClasses:
      - group: karpenter.k8s.aws
        kind: EC2NodeClass

The first entry is the default. If the file is absent, the
DEFAULT_NODE_CLASS_GROUP and DEFAULT_NODE_CLASS_KIND environment variables are
used instead.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

NODE_CLASSES_FILE = os.environ.get(
    "NODE_CLASSES_FILE", "/etc/karpenter/node-classes.yaml"
)


@dataclass(frozen=True)
class NodeClass:
    """Group and kind of a node class resource."""

    group: str
    kind: str

    @classmethod
    def from_dict(cls, data: dict) -> "NodeClass":
        group = data.get("group")
        kind = data.get("kind")
        if not group or not kind:
            raise ValueError(f"Node class entry needs a group and a kind: {data}")
        return cls(group=str(group), kind=str(kind))


def load_node_classes(path: Optional[str] = None) -> Tuple[NodeClass, ...]:
    """
    Load the default node classes.

    Resolution order:
    1. The YAML file at ``path`` (or NODE_CLASSES_FILE)
    2. DEFAULT_NODE_CLASS_GROUP / DEFAULT_NODE_CLASS_KIND env vars
    3. Nothing; conversions that need a default will then fail

    Raises:
        ValueError: If the file exists but is malformed
    """
    path = path or NODE_CLASSES_FILE
    if os.path.exists(path):
        return _load_file(path)

    logger.warning(f"Node classes file not found: {path}")
    group = os.environ.get("DEFAULT_NODE_CLASS_GROUP")
    kind = os.environ.get("DEFAULT_NODE_CLASS_KIND")
    if group and kind:
        logger.info(f"Using default node class from environment: {kind}.{group}")
        return (NodeClass(group=group, kind=kind),)

    logger.warning(
        "No default node class configured; v1beta1 NodePools without a "
        "nodeClassRef kind or apiVersion cannot be converted"
    )
    return ()


def _load_file(path: str) -> Tuple[NodeClass, ...]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse node classes file {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("nodeClasses")
    if not data:
        logger.warning(f"Node classes file is empty: {path}")
        return ()
    if not isinstance(data, list):
        raise ValueError(f"Node classes file {path} must hold a list of entries")

    node_classes = []
    for entry in data:
        if not isinstance(entry, dict):
            raise ValueError(f"Invalid node class entry in {path}: {entry!r}")
        node_classes.append(NodeClass.from_dict(entry))
    logger.info(
        f"Loaded {len(node_classes)} node class(es), default "
        f"{node_classes[0].kind}.{node_classes[0].group}"
    )
    return tuple(node_classes)
