"""Precomputed WebP variants: ingest-time conversion and edge negotiation."""

__version__ = "0.1.0"
