"""Adapters - implementations of the connector ports."""
