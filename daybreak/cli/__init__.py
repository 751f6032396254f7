"""Command line interface for Daybreak."""
