"""Command-line interface for gitobj."""
