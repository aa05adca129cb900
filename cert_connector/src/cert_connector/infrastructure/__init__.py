"""Infrastructure - configuration, logging, metrics, tracing and wiring."""
