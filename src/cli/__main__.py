# =============================================================================
# src/cli/__main__.py - Package Entry Point
# =============================================================================
#
# `python -m src.cli` runs the index CLI (ingest.py), the only CLI tool.
# =============================================================================

"""Allow ``python -m src.cli`` execution."""

from src.cli.ingest import main

main()
