"""Command line interface for gdlearn."""
