"""Command-line interface for progdedupe."""
