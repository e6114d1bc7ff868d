"""Endpoint health evaluation: conditions, results, JSON paths, glob patterns, DNS queries and endpoint, UI and security settings."""

__version__ = "0.1.0"