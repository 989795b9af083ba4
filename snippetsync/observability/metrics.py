# snippetsync/observability/metrics.py
# minimal prometheus instrumentation for the share-code lifecycle

from __future__ import annotations

import os

from prometheus_client import CollectorRegistry, Counter, make_asgi_app
from prometheus_client.multiprocess import MultiProcessCollector

# NOTE: PROMETHEUS_MULTIPROC_DIR must be set BEFORE importing this module in real multi-proc setups.
PROM_MP_DIR = os.environ.get("PROMETHEUS_MULTIPROC_DIR")
HAVE_MP = bool(PROM_MP_DIR and os.path.isdir(PROM_MP_DIR))


SHARE_CODES_ISSUED = Counter(
    "share_codes_issued_total",
    "Share codes persisted",
)
SHARE_CODE_CONFLICTS = Counter(
    "share_code_insert_conflicts_total",
    "Inserts rejected by the unique constraint and retried",
)
SHARE_CODE_RESOLUTIONS = Counter(
    "share_code_resolutions_total",
    "Share code lookups by outcome",
    ["outcome"],  # ok | not_found | expired
)
SHARE_CODES_SWEPT = Counter(
    "share_codes_swept_total",
    "Expired share codes removed by the periodic sweep",
)


def metrics_app():
    """ASGI app exposing /metrics from the default or multiprocess registry."""
    if HAVE_MP:
        registry = CollectorRegistry()
        MultiProcessCollector(registry)
        return make_asgi_app(registry=registry)
    return make_asgi_app()
