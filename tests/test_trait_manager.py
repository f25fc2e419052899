import pytest

from rudr.autoscaler import Autoscaler
from rudr.ingress import Ingress
from rudr.manual_scaler import ManualScaler
from rudr.parameter import ParameterValue
from rudr.trait_manager import TraitManager
from rudr.traits import ApiError, Empty, KubeClient, Phase, TraitBinding, TraitError
from rudr.volume_mounter import VolumeMounter
from rudr.workload_type import SERVER_NAME


class Recorder:
    def __init__(self, response=None, error=None):
        self.calls = []
        self.response = response
        self.error = error

    def __call__(self, method, path, body, content_type):
        self.calls.append((method, path, body))
        if self.error is not None:
            raise self.error
        return self.response


def manager(*bindings, parent=None):
    return TraitManager(
        config_name="config",
        instance_name="inst",
        component_name="comp",
        workload_type=SERVER_NAME,
        bindings=list(bindings),
        parent_params=parent or [],
    )


def test_load_all_known_traits():
    tm = manager(
        TraitBinding("ingress"),
        TraitBinding("autoscaler"),
        TraitBinding("manual-scaler"),
        TraitBinding("volume-mounter"),
        TraitBinding("empty"),
    )
    tm.load_traits()
    kinds = [type(t) for t in tm.traits]
    assert kinds == [Ingress, Autoscaler, ManualScaler, VolumeMounter, Empty]
    assert tm.traits[2].workload_type == SERVER_NAME
    assert tm.traits[0].instance_name == "inst"


def test_no_bindings_loads_nothing():
    tm = TraitManager(config_name="c", instance_name="i", component_name="x")
    tm.load_traits()
    assert tm.traits == []


def test_unknown_trait_raises():
    tm = manager(TraitBinding("bogus"))
    with pytest.raises(TraitError, match="unknown trait bogus"):
        tm.load_traits()


def test_from_param_resolved_from_parent():
    binding = TraitBinding(
        "ingress", [ParameterValue(name="hostname", from_param="host")]
    )
    tm = manager(binding, parent=[ParameterValue(name="host", value="in.example.com")])
    tm.load_traits()
    assert tm.traits[0].hostname == "in.example.com"


def test_unresolved_from_param_raises():
    binding = TraitBinding(
        "ingress", [ParameterValue(name="hostname", from_param="missing")]
    )
    with pytest.raises(ValueError, match="could not resolve fromParam:missing"):
        manager(binding).load_traits()


def test_exec_continues_after_failure():
    tm = manager(TraitBinding("ingress"), TraitBinding("autoscaler"), TraitBinding("empty"))
    tm.load_traits()
    rec = Recorder(error=ApiError("boom"))
    tm.exec("ns", KubeClient(transport=rec), Phase.ADD)
    assert [c[0] for c in rec.calls] == ["POST", "POST"]


def test_status_none_without_statuses():
    tm = manager(TraitBinding("empty"))
    tm.load_traits()
    assert tm.status("ns", KubeClient(transport=Recorder())) is None


def test_status_merges_trait_statuses():
    tm = manager(TraitBinding("ingress"), TraitBinding("empty"))
    tm.load_traits()
    rec = Recorder(response={"status": {"loadBalancer": {}}})
    result = tm.status("ns", KubeClient(transport=rec))
    assert result == {"ingress/inst-trait-ingress": "created"}
    assert len(rec.calls) == 1