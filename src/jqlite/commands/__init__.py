"""CLI commands for jqlite."""
