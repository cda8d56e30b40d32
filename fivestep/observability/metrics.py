"""Prometheus Metrics - curriculum and synthesis observability.

Exports:
- Session counts and curriculum completions
- Turn outcomes
- Synthesis requests by source, failures by kind, fallbacks
- Manual HD retries
- Synthesis latency
"""

from prometheus_client import Counter, Gauge, Histogram, Info

# -----------------------------------------------------------------------------
# Latency Histograms
# -----------------------------------------------------------------------------

SYNTHESIS_LATENCY = Histogram(
    "fivestep_synthesis_latency_seconds",
    "Backend speech synthesis latency",
    buckets=[0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 8.0, 13.0, 20.0],
)

TURN_LATENCY = Histogram(
    "fivestep_turn_latency_seconds",
    "Learner turn processing time (including synthesis and feedback)",
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 40.0],
)

# -----------------------------------------------------------------------------
# Counters
# -----------------------------------------------------------------------------

SESSION_STARTED = Counter(
    "fivestep_sessions_started_total",
    "Total sessions started",
)

SESSION_ENDED = Counter(
    "fivestep_sessions_ended_total",
    "Total sessions ended",
    ["reason"],  # normal, shutdown, error
)

TURNS = Counter(
    "fivestep_turns_total",
    "Learner turns by outcome",
    ["outcome"],  # completed, failed, rejected
)

CURRICULUM_COMPLETED = Counter(
    "fivestep_curriculum_completed_total",
    "Five-step cycles completed",
)

SYNTHESIS_REQUESTS = Counter(
    "fivestep_synthesis_requests_total",
    "Synthesis requests by where the audio came from",
    ["source"],  # cache, backend
)

SYNTHESIS_FAILURES = Counter(
    "fivestep_synthesis_failures_total",
    "Classified synthesis failures",
    ["kind"],  # quota, failed
)

SYNTHESIS_FALLBACKS = Counter(
    "fivestep_synthesis_fallbacks_total",
    "Chunks that degraded to the fallback voice",
)

MANUAL_RETRIES = Counter(
    "fivestep_manual_retries_total",
    "Learner-triggered HD retries",
    ["outcome"],  # succeeded, failed, in_flight
)

# -----------------------------------------------------------------------------
# Gauges
# -----------------------------------------------------------------------------

ACTIVE_SESSIONS = Gauge(
    "fivestep_active_sessions",
    "Currently active sessions",
)

CACHE_ENTRIES = Gauge(
    "fivestep_speech_cache_entries",
    "Entries held by the process speech cache",
)

# -----------------------------------------------------------------------------
# Info
# -----------------------------------------------------------------------------

BUILD_INFO = Info(
    "fivestep_build",
    "Build information",
)


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def record_session_start() -> None:
    """Record session start."""
    SESSION_STARTED.inc()
    ACTIVE_SESSIONS.inc()


def record_session_end(reason: str = "normal") -> None:
    """Record session end."""
    SESSION_ENDED.labels(reason=reason).inc()
    ACTIVE_SESSIONS.dec()


def record_turn(outcome: str, latency_ms: float | None = None) -> None:
    """Record a learner turn outcome."""
    TURNS.labels(outcome=outcome).inc()
    if latency_ms is not None:
        TURN_LATENCY.observe(latency_ms / 1000.0)


def record_curriculum_completed() -> None:
    """Record a completed five-step cycle."""
    CURRICULUM_COMPLETED.inc()


def record_synthesis_request(source: str, latency_ms: float | None = None) -> None:
    """Record where synthesized audio was served from."""
    SYNTHESIS_REQUESTS.labels(source=source).inc()
    if latency_ms is not None:
        SYNTHESIS_LATENCY.observe(latency_ms / 1000.0)


def record_synthesis_failure(kind: str) -> None:
    """Record a classified synthesis failure."""
    SYNTHESIS_FAILURES.labels(kind=kind).inc()


def record_synthesis_fallback() -> None:
    """Record a degradation to the fallback voice."""
    SYNTHESIS_FALLBACKS.inc()


def record_manual_retry(outcome: str) -> None:
    """Record a manual HD retry outcome."""
    MANUAL_RETRIES.labels(outcome=outcome).inc()


def update_cache_entries(count: int) -> None:
    """Update the cache size gauge."""
    CACHE_ENTRIES.set(count)


def set_build_info(version: str, environment: str) -> None:
    """Set build information."""
    BUILD_INFO.info({"version": version, "environment": environment})
