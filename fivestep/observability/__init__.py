"""Observability module - structured logging and Prometheus metrics."""

from fivestep.observability.logging import (
    SessionLogger,
    SynthesisLogger,
    bind_session,
    configure_logging,
    get_logger,
    init_logging,
    unbind_session,
)

__all__ = [
    "SessionLogger",
    "SynthesisLogger",
    "bind_session",
    "configure_logging",
    "get_logger",
    "init_logging",
    "unbind_session",
]
