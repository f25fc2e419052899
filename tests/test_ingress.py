import pytest

from rudr.ingress import Ingress
from rudr.traits import ApiError, KubeClient
from rudr.workload_type import SERVER_NAME, SINGLETON_SERVER_NAME


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


ING_PATH = "/apis/extensions/v1beta1/namespaces/default/ingresses"


def make():
    return Ingress.from_params(
        "my-ingress",
        "squid",
        "patsy",
        {"service_port": 8080, "hostname": "in.example.com", "path": "/path"},
        None,
    )


def test_ingress():
    king = make().to_ext_ingress()
    assert king["metadata"]["name"] == "squid-trait-ingress"
    rules = king["spec"]["rules"]
    assert len(rules) == 1
    rule = rules[0]
    assert rule["host"] == "in.example.com"
    path = rule["http"]["paths"][0]
    assert path["path"] == "/path"
    assert path["backend"]["serviceName"] == "squid"
    assert path["backend"]["servicePort"] == 8080


def test_ingress_defaults():
    ig = Ingress(
        name="my-ingress", instance_name="squid", component_name="patsy", svc_port=8080
    )
    rule = ig.to_ext_ingress()["spec"]["rules"][0]
    assert rule["host"] == "example.com"
    assert rule["http"]["paths"][0]["path"] == "/"


def test_from_params_defaults():
    ig = Ingress.from_params("n", "i", "c", {"hostname": 5}, None)
    assert ig.svc_port == 80
    assert ig.hostname == ""
    assert ig.path is None


def test_owner_refs_and_labels():
    owner = {"apiVersion": "v1", "kind": "X", "name": "o", "uid": "abc"}
    ig = Ingress.from_params("n", "i", "c", {}, [owner])
    metadata = ig.to_ext_ingress()["metadata"]
    assert metadata["ownerReferences"] == [owner]
    assert metadata["labels"]["app.kubernetes.io/name"] == "n"


def test_ingress_workload_types():
    assert Ingress.supports_workload_type(SERVER_NAME)
    assert Ingress.supports_workload_type(SINGLETON_SERVER_NAME)


def test_add_modify_delete_requests():
    recorder = Recorder(response={})
    client = KubeClient(transport=recorder)
    ig = make()
    body = ig.to_ext_ingress()
    ig.add("default", client)
    ig.modify("default", client)
    ig.delete("default", client)
    assert recorder.calls == [
        ("POST", ING_PATH, body, "application/json"),
        (
            "PATCH",
            ING_PATH + "/squid-trait-ingress",
            body,
            "application/strategic-merge-patch+json",
        ),
        ("DELETE", ING_PATH + "/my-ingress", None, "application/json"),
    ]


def test_status_created_when_load_balancer_present():
    client = KubeClient(transport=Recorder(response={"status": {"loadBalancer": {}}}))
    assert make().status("default", client) == {"ingress/squid-trait-ingress": "created"}


def test_status_none_without_load_balancer():
    client = KubeClient(transport=Recorder(response={"status": {}}))
    assert make().status("default", client) is None


def test_status_reports_error():
    client = KubeClient(transport=Recorder(error=ApiError("gone", code=404)))
    assert make().status("default", client) == {"ingress/squid-trait-ingress": "gone"}


def test_add_propagates_api_error():
    client = KubeClient(transport=Recorder(error=ApiError("conflict", code=409)))
    with pytest.raises(ApiError, match="conflict"):
        make().add("default", client)