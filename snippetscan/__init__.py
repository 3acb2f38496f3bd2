"""Winnowing fingerprints and curated snippet scan results."""

__version__ = "0.1.0"
