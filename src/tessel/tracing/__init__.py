from tessel.tracing.lifecycle import get_tracer, init_tracing, shutdown_tracing
from tessel.tracing.listener import TracingListener


__all__ = [
    "TracingListener",
    "get_tracer",
    "init_tracing",
    "shutdown_tracing",
]
