"""Test suite for Review Activity DB."""
