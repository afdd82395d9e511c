"""Command-line interface for schemashift (typer + rich)."""
