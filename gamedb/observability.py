from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram, write_to_textfile


# Migrations run as a batch job, so metrics are exported through a textfile
# (node-exporter textfile collector) instead of an HTTP endpoint.
REGISTRY = CollectorRegistry()

MIGRATION_STEPS_TOTAL = Counter(
    "migration_steps_total",
    "Migration steps by outcome",
    ["step", "outcome"],
    registry=REGISTRY,
)
MIGRATION_STEP_LATENCY = Histogram(
    "migration_step_latency_ms",
    "Migration step latency in milliseconds",
    ["step"],
    buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000),
    registry=REGISTRY,
)
SEED_RECORDS_TOTAL = Counter(
    "seed_records_total",
    "Seed records reconciled, by outcome",
    ["collection", "outcome"],
    registry=REGISTRY,
)


def write_metrics(path: str) -> None:
    write_to_textfile(path, REGISTRY)
