# khcore

`khcore` holds the pieces that a Kubernetes synthetic-check system is built from:

- the status records that checks and jobs report into;
- the overall status page and the Prometheus metrics made from it;
- the choice of a master among running instances;
- the decision logic of several standard checks.

The check logic takes plain Python data: pods, events, quotas and connection
targets. It returns the failures it finds. It does not go to a cluster to fetch
that data.

## Installation

```
pip install khcore
```

To run the test suite:

```
pip install "khcore[test]"
pytest
```

The package uses only the standard library.

## What is inside

| Module | Purpose |
| --- | --- |
| `khcore.workload` | `KHWorkload`, `WorkloadDetails`, `KuberhealthyState`: the status of one check or job, with `to_dict`/`from_dict` |
| `khcore.health` | `State` and `new_state`: the overall status, with `add_error`, `to_json` and `write_http_status_response` |
| `khcore.resources` | `KuberhealthyCheck`, `KuberhealthyJob`, their configs (`CheckConfig`, `JobConfig`), `JobPhase` and list types |
| `khcore.durations` | `parse_duration` and `format_duration` for duration strings such as `1m30s` |
| `khcore.metrics` | `generate_metrics`, `error_state_metrics`, `write_metric_error`, `prom_metric_name`, `PromMetricsConfig` and the `MetricsClient` protocol |
| `khcore.master` | `calculate_master`, `i_am_master` and `get_env_var`: choose the master among running pods |
| `khcore.podstatus` | `Pod`, `PodPhase`, `find_pods_not_running`: report old enough pods in Pending, Failed or Unknown |
| `khcore.podrestarts` | `Event`, `PodRestartsChecker`, `parse_max_failures`: find pods with too many `BackOff` warning events |
| `khcore.quota` | `QuotaSettings`, `ResourceQuota`, `parse_settings`, `examine_resource_quotas`: flag namespaces whose CPU or memory quota use reaches a threshold |
| `khcore.netcheck` | `split_address`, `NetworkConnectionChecker`: test that a TCP or UDP target can be reached |
| `khcore.crdgen` | `CrdName`, `CrdGenerator`, `main`: generate CRD manifests by running `controller-gen` |

## Examples

Build the status page and render it as Prometheus metrics:

```python
from khcore.health import new_state
from khcore.metrics import PromMetricsConfig, generate_metrics
from khcore.workload import KHWorkload, new_workload_details

state = new_state()
details = new_workload_details(KHWorkload.KHCHECK)
details.ok = True
details.run_duration = "1m30s"
state.check_details["dns-check"] = details

print(generate_metrics(state, PromMetricsConfig()))
print(state.to_json())
```

`PromMetricsConfig(suppress_error_label=True)` leaves the `error` label out.
`error_label_max_length` cuts the label down to that many bytes.

Durations:

```python
from khcore.durations import format_duration, parse_duration

parse_duration("1m30s")   # 90.0 (seconds)
format_duration(90)       # "1m30s"
```

Choose a master among the running pods:

```python
from khcore.master import calculate_master, i_am_master

calculate_master(["kh-b", "kh-a"])                    # "kh-a"
i_am_master(["kh-b", "kh-a"], "KH-A", force=False)    # True
```

If you leave out the pod name, `i_am_master` reads it from the `POD_NAME`
environment variable.

Find unhealthy pods:

```python
from khcore.podstatus import Pod, PodPhase, find_pods_not_running

pods = [Pod("web-1", "shop", PodPhase.PENDING), Pod("web-2", "shop", PodPhase.RUNNING)]
find_pods_not_running(pods, skip_duration="10m")
# ["pod: web-1 in namespace: shop is in pod status phase Pending "]
```

Check resource quotas:

```python
from khcore.quota import ResourceQuota, examine_resource_quotas, parse_settings

settings = parse_settings({"THRESHOLD": "0.8", "BLACKLIST": "kube-system"})
quotas = {"default": [ResourceQuota(cpu_used=900, cpu_limit=1000)]}
examine_resource_quotas(["default", "kube-system"], lambda ns: quotas.get(ns, []), settings)
# one message saying that cpu in "default" has reached the threshold
```

Split a connection target into protocol and address, then check it:

```python
from khcore.netcheck import NetworkConnectionChecker, split_address

split_address("udp://10.0.0.1:53")   # ("udp", "10.0.0.1:53")
split_address("10.0.0.1:443")        # ("tcp", "10.0.0.1:443")

NetworkConnectionChecker("tcp://localhost:8080").run(timeout=5.0)  # [] when reachable
```

## Generating CRD manifests

The `khcore-crdgen` command runs `controller-gen` once for each custom
resource definition: khcheck, khjob and khstate. Each run starts in
`../pkg/apis/<kind>/v1` relative to the current directory and writes the
manifests to `./generated`. The command exits with status 1 at the first
failure.

```
khcore-crdgen --controller-gen /usr/local/bin/controller-gen
```

If you leave out `--controller-gen`, the command looks for `controller-gen` on
your `PATH`. The `--gojsontoyaml` option is accepted, but no step uses it.

## What this package does not do

- It has no Kubernetes API client. You fetch pods, events, namespaces and
  resource quotas yourself and pass them in.
- It does not report check results to a status server. The checks return the
  failure messages; what you do with them is up to you.
- It does not run an HTTP server. `State.write_http_status_response` and
  `write_metric_error` only write bytes to a writer you give them.
- `MetricsClient` is only a protocol. No metrics backend comes with the
  package.
- It has no SSL certificate checks.