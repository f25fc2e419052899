# rudr

This package provides building blocks for running Open Application Model (OAM)
applications on Kubernetes. It covers parameter resolution, configuration
variables, operational traits and application scopes. Kubernetes objects are
built as plain dictionaries in their JSON form. Every cluster operation goes
through a small `KubeClient`.

## Installation

```
pip install rudr
```

The package has no runtime dependencies. To run the tests:

```
pip install "rudr[test]"
pytest
```

## Modules

- `rudr.parameter`
  - `Parameter` and `ParameterType`: a `Parameter` checks its own type with
    `Parameter.validate`.
  - `ParameterValue`.
  - `resolve_parameters(definition, values)`: applies defaults and validates
    each value. It reports every failure together in one `ValidationErrors`,
    whose message begins with `validation failed`.
  - `resolve_values(current, parent)`: resolves `from_param` references
    against the parent's values. It raises `ValueError` when a reference cannot
    be resolved and no value is given.
  - `resolve_value(params, from_param, value)`: renders a resolved value as a
    string.
  - `extract_value_params`, `extract_string_params` and
    `extract_number_params`: look up a single value by name.
- `rudr.variable`
  - `Variable`: variables compare by name.
  - `parse_from_variable`: recognises the `[fromVariable(NAME)]` syntax.
  - `expand_variables` and `resolve_variables`: substitute variable values.
    They raise `ValueError` for an undefined variable.
  - `get_variable_values` and `dedup`.
- `rudr.workload_type`
  - The core workload type names, such as `SERVER_NAME`, `TASK_NAME` and
    `WORKER_NAME`.
  - The abstract `WorkloadType` and `KubeName` interfaces, and `WorkloadError`.
  - By default `WorkloadType.modify` and `WorkloadType.status` raise
    `WorkloadError`, `delete` succeeds, and `validate` reports any problems
    that a subclass yields.
- `rudr.traits`
  - `Phase`.
  - `TraitBinding`, with `TraitBinding.from_dict`.
  - The `TraitImplementation` base class, whose `exec` dispatches a phase to
    its handler.
  - `Empty`, `trait_labels`, `TraitError` and `ApiError`.
  - `KubeClient`: offers `create`, `read`, `read_status`, `replace`, `patch`
    and `delete`.
    - It handles Deployments, Jobs, PersistentVolumeClaims, Ingresses,
      HorizontalPodAutoscalers and HealthScopes.
    - By default it sends JSON over HTTP to `base_url`, which defaults to
      `http://localhost:8001`, the address of `kubectl proxy`.
    - Pass `transport=` to route requests elsewhere, for example to a fake in
      tests.
- Traits
  - `rudr.autoscaler.Autoscaler`: a HorizontalPodAutoscaler.
  - `rudr.ingress.Ingress`: an extensions/v1beta1 Ingress.
  - `rudr.manual_scaler.ManualScaler`: sets a Deployment's replicas or a Job's
    parallelism. It waits `settle_seconds`, 5 by default, before scaling.
  - `rudr.volume_mounter.VolumeMounter`: a PersistentVolumeClaim, sized from
    the matching component volume, with a default of `200M`.
- `rudr.trait_manager.TraitManager`
  - `load_traits` builds the traits named by its bindings and raises
    `TraitError` for an unknown name.
  - `exec` runs a phase on every trait and logs failures instead of raising
    them.
  - `status` merges the traits' statuses.
- Scopes
  - `rudr.scopes`: the abstract `Scope` interface, `ComponentRef`,
    `ScopeError` and `convert_owner_ref`.
  - `rudr.health.Health`: creates and updates a HealthScope custom resource.
  - `rudr.network.Network`: only validates its configuration. Its `create`,
    `modify`, `delete`, `add` and `remove` raise `ScopeError`.

## Example

```python
from rudr.parameter import ParameterValue, resolve_values
from rudr.autoscaler import Autoscaler

parent = [ParameterValue(name="cpu", value=60)]
binding = [ParameterValue(name="cpu", from_param="cpu")]
params = resolve_values(binding, parent)

scaler = Autoscaler.from_params("my-app", "web", "web-component", params, None)
manifest = scaler.to_horizontal_pod_autoscaler()
print(manifest["metadata"]["name"])  # web-trait-autoscaler
```

## What it does not do

This package is a library. It is not a running controller:

- It has no command.
- It does not watch the cluster for application configurations.
- It has no implementations of the workload types themselves, such as servers,
  tasks or workers.

Component schematics are passed to `VolumeMounter` and `TraitManager` as plain
dictionaries in their JSON form, not as typed objects.