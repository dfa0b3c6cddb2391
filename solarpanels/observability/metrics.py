"""
Prometheus metrics for the request lifecycle. Exposed at /metrics by main.py.
"""

from prometheus_client import Counter

REQUEST_TRANSITIONS = Counter(
    "solarpanel_request_transitions_total",
    "Solar panel request status transitions",
    ["transition"],
)

CALCULATION_CALLS = Counter(
    "calculation_service_calls_total",
    "Calls to the external power calculation service by outcome",
    ["outcome"],
)


def record_transition(transition: str) -> None:
    REQUEST_TRANSITIONS.labels(transition=transition).inc()


def record_calculation_call(outcome: str) -> None:
    CALCULATION_CALLS.labels(outcome=outcome).inc()
