"""credkeep CLI — Typer-based command line interface."""
