import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from conversion import annotations, template  # noqa: E402
from node_classes import NodeClass  # noqa: E402

NODE_CLASSES = (NodeClass(group="karpenter.k8s.aws", kind="EC2NodeClass"),)


def _make_v1_template():
    return {
        "metadata": {"labels": {"app": "web"}},
        "spec": {
            "taints": [{"key": "a", "value": "b", "effect": "NoSchedule"}],
            "startupTaints": [{"key": "c", "effect": "NoSchedule"}],
            "requirements": [
                {"key": "node.kubernetes.io/instance-type", "operator": "In",
                 "values": ["m5.large"], "minValues": 1},
                {"key": "topology.kubernetes.io/zone", "operator": "Exists"},
            ],
            "nodeClassRef": {"name": "default", "kind": "EC2NodeClass",
                             "group": "karpenter.k8s.aws"},
            "expireAfter": "24h",
            "terminationGracePeriod": "30m",
        },
    }


def test_to_legacy():
    result = template.to_legacy(_make_v1_template(), {"metadata": {}})
    assert result == {
        "metadata": {"labels": {"app": "web"}},
        "spec": {
            "taints": [{"key": "a", "value": "b", "effect": "NoSchedule"}],
            "startupTaints": [{"key": "c", "effect": "NoSchedule"}],
            "requirements": [
                {"key": "node.kubernetes.io/instance-type", "operator": "In",
                 "values": ["m5.large"]},
                {"key": "topology.kubernetes.io/zone", "operator": "Exists"},
            ],
            "nodeClassRef": {"name": "default", "kind": "EC2NodeClass"},
        },
    }


def test_to_legacy_reads_kubelet_annotation():
    holder = {"metadata": {}}
    annotations.store(
        holder, annotations.KUBELET_COMPATIBILITY_ANNOTATION_KEY, {"podsPerCore": 4}
    )
    result = template.to_legacy(_make_v1_template(), holder)
    assert result["spec"]["kubelet"] == {"podsPerCore": 4}


def test_from_legacy_without_kubelet():
    legacy = {
        "spec": {
            "requirements": [{"key": "k", "operator": "In", "values": ["v"]}],
            "nodeClassRef": {"name": "default"},
        }
    }
    result, kubelet = template.from_legacy(legacy, NODE_CLASSES)
    assert kubelet is None
    assert result == {
        "spec": {
            "requirements": [{"key": "k", "operator": "In", "values": ["v"]}],
            "nodeClassRef": {"name": "default", "kind": "EC2NodeClass",
                             "group": "karpenter.k8s.aws"},
        }
    }


def test_from_legacy_encodes_kubelet():
    legacy = {
        "spec": {
            "nodeClassRef": {"name": "default"},
            "kubelet": {"maxPods": 20, "cpuCFSQuota": False},
        }
    }
    result, kubelet = template.from_legacy(legacy, NODE_CLASSES)
    assert kubelet == '{"cpuCFSQuota":false,"maxPods":20}'
    assert "kubelet" not in result["spec"]


def test_expire_after_relocation():
    legacy_disruption = {}
    template.expire_after_to_legacy(
        {"template": {"spec": {"expireAfter": "Never"}}}, legacy_disruption
    )
    assert legacy_disruption == {"expireAfter": "Never"}

    template_spec = {}
    template.expire_after_from_legacy(
        {"disruption": {"expireAfter": "48h"}}, template_spec
    )
    assert template_spec == {"expireAfter": "48h"}


def test_expire_after_absent():
    legacy_disruption = {}
    template.expire_after_to_legacy({"template": {"spec": {}}}, legacy_disruption)
    assert legacy_disruption == {}
