"""Building blocks for Kubernetes synthetic health checks: workload state, metrics, master choice and check logic."""

__version__ = "2.5.0"