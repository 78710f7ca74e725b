"""Prometheus metrics for the Triton Load Balancer Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "triton_lb_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "triton_lb_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 5.0, 30.0, 60.0, 120.0, 300.0],
)

error_total = Counter(
    "triton_lb_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type", "classification"],
)

# Load balancer lifecycle metrics
loadbalancer_operations_total = Counter(
    "triton_lb_operator_loadbalancer_operations_total",
    "Total number of load balancer operations",
    ["operation", "result"],
)

poll_wait_seconds = Histogram(
    "triton_lb_operator_poll_wait_seconds",
    "Time spent waiting for load balancer instances to converge",
    ["operation", "result"],
    buckets=[1.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0],
)

# API call metrics
api_call_total = Counter(
    "triton_lb_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "triton_lb_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "triton_lb_operator_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)
