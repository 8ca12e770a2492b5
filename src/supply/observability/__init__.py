"""Structured logging and Prometheus metrics for pipeline walks."""
