"""Infrastructure layer — resilience and observability for the Live bridge.

Modules:
    reconnect       Bounded fixed-delay reconnect policy.
    metrics         Prometheus metrics registry.
    logging_config  Stderr logging setup for entry points.
"""
