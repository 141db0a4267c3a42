# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""
from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "labassign_requests_total",
    "Total HTTP requests to the lab assignment service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "labassign_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "labassign_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
ASSIGNMENT_RUNS = Counter(
    "labassign_generation_runs_total",
    "Total assignment generation runs",
    ["source", "outcome"],
)
ASSIGNMENTS_GENERATED = Counter(
    "labassign_assignments_generated_total",
    "Total assignments produced by the generator",
    ["role"],
)
UNDER_ALLOCATED_LABS = Gauge(
    "labassign_under_allocated_labs",
    "Labs below the minimum member count in the latest generation run",
)
MEMBERSHIP_WRITES = Counter(
    "labassign_membership_writes_total",
    "Membership writes against the lab backend",
    ["operation", "outcome"],
)
BACKEND_REQUEST_LATENCY = Histogram(
    "labassign_backend_request_duration_seconds",
    "Latency of calls to the lab-management backend",
    ["method"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
REPORTS_REASSIGNED = Counter(
    "labassign_reports_reassigned_total",
    "Reports whose reporter was changed",
    ["outcome"],
)
