"""Command-line interface for the deck analysis engine."""
