import pytest

from rudr.autoscaler import Autoscaler
from rudr.traits import ApiError, KubeClient
from rudr.workload_type import SERVER_NAME, SINGLETON_SERVER_NAME, TASK_NAME, WORKER_NAME


class Recorder:
    def __init__(self, response=None, error=None):
        self.calls = []
        self.response = response
        self.error = error

    def __call__(self, method, path, body, content_type):
        self.calls.append((method, path, body, content_type))
        if self.error is not None:
            raise self.error
        return self.response


HPA_PATH = "/apis/autoscaling/v2beta1/namespaces/default/horizontalpodautoscalers"


def make(params):
    return Autoscaler.from_params("release", "instance", "component", params, None)


def test_autoscaler_defaults():
    autoscaler = Autoscaler(
        name="release", instance_name="instance", component_name="component"
    )
    kauto = autoscaler.to_horizontal_pod_autoscaler()
    assert kauto["metadata"]["name"] == "instance-trait-autoscaler"
    assert kauto["spec"]["maxReplicas"] == 10
    assert "minReplicas" not in kauto["spec"]
    assert kauto["spec"]["metrics"] == []


def test_autoscaler_cpu():
    kauto = make({"cpu": 42, "minimum": 6, "maximum": 7}).to_horizontal_pod_autoscaler()
    assert kauto["metadata"]["name"] == "instance-trait-autoscaler"
    spec = kauto["spec"]
    assert spec["maxReplicas"] == 7
    assert spec["minReplicas"] == 6
    assert spec["metrics"][0]["resource"]["targetAverageUtilization"] == 42
    assert spec["metrics"][0]["resource"]["name"] == "cpu"


def test_autoscaler_memory():
    kauto = make(
        {"memory": 50, "minimum": 6, "maximum": 7}
    ).to_horizontal_pod_autoscaler()
    assert kauto["metadata"]["name"] == "instance-trait-autoscaler"
    spec = kauto["spec"]
    assert spec["maxReplicas"] == 7
    assert spec["minReplicas"] == 6
    assert spec["metrics"][0]["resource"]["targetAverageUtilization"] == 50
    assert spec["metrics"][0]["resource"]["name"] == "memory"


def test_autoscaler_multi_metrics_resource():
    kauto = make(
        {"cpu": 42, "memory": 50, "minimum": 6, "maximum": 7}
    ).to_horizontal_pod_autoscaler()
    spec = kauto["spec"]
    assert spec["maxReplicas"] == 7
    assert spec["minReplicas"] == 6
    assert spec["metrics"][0]["resource"]["targetAverageUtilization"] == 42
    assert spec["metrics"][1]["resource"]["targetAverageUtilization"] == 50


def test_max_defaults_to_minimum_plus_ten():
    kauto = make({"minimum": 3}).to_horizontal_pod_autoscaler()
    assert kauto["spec"]["maxReplicas"] == 13


def test_non_integer_params_ignored():
    autoscaler = make({"cpu": "lots", "minimum": 2.5, "maximum": True})
    assert (autoscaler.cpu, autoscaler.minimum, autoscaler.maximum) == (None, None, None)


def test_scale_target_and_labels():
    kauto = make({}).to_horizontal_pod_autoscaler()
    assert kauto["spec"]["scaleTargetRef"] == {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "name": "instance",
    }
    assert kauto["metadata"]["labels"]["oam.dev/instance-name"] == "instance"


def test_autoscaler_workload_types():
    assert Autoscaler.supports_workload_type(SERVER_NAME)
    assert Autoscaler.supports_workload_type(TASK_NAME)
    assert Autoscaler.supports_workload_type(WORKER_NAME)
    assert not Autoscaler.supports_workload_type(SINGLETON_SERVER_NAME)


def test_add_modify_delete_requests():
    recorder = Recorder(response={})
    client = KubeClient(transport=recorder)
    autoscaler = make({"cpu": 42})
    body = autoscaler.to_horizontal_pod_autoscaler()
    autoscaler.add("default", client)
    autoscaler.modify("default", client)
    autoscaler.delete("default", client)
    assert recorder.calls == [
        ("POST", HPA_PATH, body, "application/json"),
        (
            "PATCH",
            HPA_PATH + "/instance-trait-autoscaler",
            body,
            "application/strategic-merge-patch+json",
        ),
        ("DELETE", HPA_PATH + "/instance-trait-autoscaler", None, "application/json"),
    ]


def test_status_reports_current_replicas():
    client = KubeClient(transport=Recorder(response={"status": {"currentReplicas": 3}}))
    assert make({}).status("default", client) == {
        "horizontalpodautoscaler/instance-trait-autoscaler": "3"
    }


def test_status_without_status_is_none():
    client = KubeClient(transport=Recorder(response={"metadata": {}}))
    assert make({}).status("default", client) is None


def test_status_reports_error():
    client = KubeClient(transport=Recorder(error=ApiError("not found", code=404)))
    assert make({}).status("default", client) == {
        "horizontalpodautoscaler/instance-trait-autoscaler": "not found"
    }


def test_add_propagates_api_error():
    client = KubeClient(transport=Recorder(error=ApiError("denied", code=403)))
    with pytest.raises(ApiError, match="denied"):
        make({}).add("default", client)