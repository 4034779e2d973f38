"""Command-line interface for Review Activity DB."""
