"""
Prometheus metrics for the commit–reveal engine.

Instruments:
  • commits_total{outcome}             - commit attempts
  • reveals_total{outcome}             - reveal attempts
  • instant_total{outcome}             - instant-number draws
  • pending_resolutions_total{outcome} - pending-slot checks that changed state
  • attestations_total{outcome}        - recovery attestations
  • recovery_queue_length              - heights currently awaiting attestation

Label cardinality is kept low: only an `outcome` label with a small, finite
vocabulary; anything else folds into "invalid".

Usage
-----
    from blockrand.metrics import METRICS

    METRICS.record_commit("accepted")
    METRICS.record_pending("expired")
    METRICS.set_recovery_length(3)

Tests and embedders that need isolation construct their own `Metrics` with a
private `CollectorRegistry`.
"""

from __future__ import annotations

from prometheus_client import REGISTRY, Counter, Gauge

# --------- Vocabularies (kept small for bounded cardinality) ---------

_COMMIT_OUTCOMES = (
    "accepted",
    "duplicate",
    "invalid",
)

_REVEAL_OUTCOMES = (
    "accepted",
    "unknown_seed",
    "not_ready",
    "invalid_divisor",
    "invalid",
)

_INSTANT_OUTCOMES = (
    "accepted",
    "invalid_divisor",
    "invalid",
)

_PENDING_OUTCOMES = (
    "captured",   # hash captured inside the window
    "expired",    # window missed or lookup empty → recovery queue
    "invalid",
)

_ATTEST_OUTCOMES = (
    "accepted",     # height was queued; hash stored
    "absent",       # height not queued; no-op
    "denied",       # caller lacks attester role
    "already_set",  # hash already captured
    "invalid",
)


def _fold(outcome: str, vocab: tuple) -> str:
    return outcome if outcome in vocab else "invalid"


class Metrics:
    """
    Container for all blockrand Prometheus instruments.

    Args:
        namespace: Prometheus metric namespace (prefix).
        subsystem: Prometheus metric subsystem.
        registry:  Prometheus registry to register the metrics with.
    """

    def __init__(
        self,
        *,
        namespace: str = "blockrand",
        subsystem: str = "engine",
        registry=REGISTRY,
    ) -> None:
        def _counter(name: str, doc: str) -> Counter:
            return Counter(
                name,
                doc,
                labelnames=("outcome",),
                namespace=namespace,
                subsystem=subsystem,
                registry=registry,
            )

        self.commits_total = _counter(
            "commits_total", "Seed commit attempts, labeled by outcome."
        )
        self.reveals_total = _counter(
            "reveals_total", "Seed reveal attempts, labeled by outcome."
        )
        self.instant_total = _counter(
            "instant_total", "Instant-number draws, labeled by outcome."
        )
        self.pending_resolutions_total = _counter(
            "pending_resolutions_total",
            "Pending-slot checks that captured or expired a height.",
        )
        self.attestations_total = _counter(
            "attestations_total", "Recovery attestations, labeled by outcome."
        )
        self.recovery_queue_length = Gauge(
            "recovery_queue_length",
            "Heights whose block hash must be supplied by an attester.",
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )

    # ----- Recording helpers -------------------------------------------------

    def record_commit(self, outcome: str) -> None:
        self.commits_total.labels(outcome=_fold(outcome, _COMMIT_OUTCOMES)).inc()

    def record_reveal(self, outcome: str) -> None:
        self.reveals_total.labels(outcome=_fold(outcome, _REVEAL_OUTCOMES)).inc()

    def record_instant(self, outcome: str) -> None:
        self.instant_total.labels(outcome=_fold(outcome, _INSTANT_OUTCOMES)).inc()

    def record_pending(self, outcome: str) -> None:
        self.pending_resolutions_total.labels(outcome=_fold(outcome, _PENDING_OUTCOMES)).inc()

    def record_attestation(self, outcome: str) -> None:
        self.attestations_total.labels(outcome=_fold(outcome, _ATTEST_OUTCOMES)).inc()

    def set_recovery_length(self, n: int) -> None:
        self.recovery_queue_length.set(n)


# Singleton used by default
METRICS = Metrics()

__all__ = ["Metrics", "METRICS"]
