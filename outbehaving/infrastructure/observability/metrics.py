"""Prometheus metrics for backend failures, payments, rewards and webhooks"""

from prometheus_client import Counter, Histogram

# Backend gateway
backend_failure_counter = Counter(
    "outbehaving_backend_failures_total",
    "Classified backend call failures",
    ["error_type"],
)

quarantined_records_counter = Counter(
    "outbehaving_quarantined_records_total",
    "Malformed backend records dropped at the boundary",
    ["collection"],
)

# Goals and loyalty
goal_payment_counter = Counter(
    "outbehaving_goal_payments_total",
    "Goal payments by outcome",
    ["outcome"],  # applied | refused | failed | rolled_back | inconsistent
)

reward_redemption_counter = Counter(
    "outbehaving_rewards_redeemed_total",
    "Rewards redeemed",
)

# Webhook
webhook_event_counter = Counter(
    "outbehaving_webhook_events_total",
    "Inbound chat-platform webhook traffic",
    ["kind"],  # verified | rejected | received
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_goal_payment(outcome: str) -> None:
    goal_payment_counter.labels(outcome=outcome).inc()
