import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from conversion import annotations, node_class_ref  # noqa: E402
from conversion.errors import EncodingError, MissingDefaultError  # noqa: E402
from node_classes import NodeClass  # noqa: E402

KEY = annotations.NODE_CLASS_REFERENCE_ANNOTATION_KEY
NODE_CLASSES = (NodeClass(group="karpenter.k8s.aws", kind="EC2NodeClass"),)


class TestFromLegacy:
    def test_explicit_values(self):
        ref = {"name": "a", "kind": "Custom", "apiVersion": "custom.io/v1alpha1"}
        assert node_class_ref.from_legacy(ref, NODE_CLASSES) == {
            "name": "a",
            "kind": "Custom",
            "group": "custom.io",
        }

    def test_blank_values_use_first_default(self):
        node_classes = (NodeClass(group="g.io", kind="X"), NodeClass(group="h.io", kind="Y"))
        ref = {"name": "a", "kind": "", "apiVersion": ""}
        assert node_class_ref.from_legacy(ref, node_classes) == {
            "name": "a",
            "kind": "X",
            "group": "g.io",
        }

    def test_missing_keys_use_default(self):
        assert node_class_ref.from_legacy({"name": "a"}, NODE_CLASSES) == {
            "name": "a",
            "kind": "EC2NodeClass",
            "group": "karpenter.k8s.aws",
        }

    def test_only_kind_defaulted(self):
        ref = {"name": "a", "apiVersion": "custom.io/v1"}
        assert node_class_ref.from_legacy(ref, NODE_CLASSES)["kind"] == "EC2NodeClass"

    def test_group_without_version(self):
        ref = {"name": "a", "kind": "K", "apiVersion": "custom.io"}
        assert node_class_ref.from_legacy(ref, ())["group"] == "custom.io"

    def test_empty_registry(self):
        with pytest.raises(MissingDefaultError):
            node_class_ref.from_legacy({"name": "a", "kind": "K"}, ())


class TestToLegacy:
    def test_without_annotation(self):
        ref = {"name": "a", "kind": "EC2NodeClass", "group": "karpenter.k8s.aws"}
        assert node_class_ref.to_legacy(ref, {"metadata": {}}) == {
            "name": "a",
            "kind": "EC2NodeClass",
        }

    def test_annotation_wins(self):
        holder = {"metadata": {"annotations": {KEY: '{"apiVersion":"","kind":"","name":"a"}'}}}
        ref = {"name": "a", "kind": "EC2NodeClass", "group": "karpenter.k8s.aws"}
        assert node_class_ref.to_legacy(ref, holder) == {
            "name": "a",
            "kind": "",
            "apiVersion": "",
        }

    def test_malformed_annotation(self):
        holder = {"metadata": {"annotations": {KEY: "{"}}}
        with pytest.raises(EncodingError):
            node_class_ref.to_legacy({"name": "a"}, holder)


def test_remember_overwrites_annotation():
    holder = {"metadata": {"annotations": {KEY: '{"name":"old"}'}}}
    ref = {"name": "new", "kind": "K", "apiVersion": "g.io/v1"}
    node_class_ref.remember(ref, holder)
    assert annotations.load_json(holder, KEY) == ref
