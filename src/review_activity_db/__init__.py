"""Review Activity DB - PR and review comment activity for tracked engineers."""

__version__ = "0.1.0"
