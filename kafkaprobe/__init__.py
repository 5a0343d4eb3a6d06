"""Kafka connectivity probe."""

__version__ = "0.1.0"
