"""Command-line entry points. Each command module exposes main(argv) -> exit code."""
