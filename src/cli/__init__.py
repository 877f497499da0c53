# =============================================================================
# src/cli/__init__.py - CLI Module Overview
# =============================================================================
#
# Command-line tools for operating lexsearch outside the web server.
#
# Architecture Notes:
#   - argparse for argument parsing, no extra CLI framework.
#   - Heavy imports (Pinecone, Voyage SDKs) are deferred inside functions
#     so lightweight commands start fast.
#   - Services are assembled with the same factory the web app uses, so
#     chunking, batching and namespaces match the deployed service.
# =============================================================================

"""CLI tools for lexsearch.

- ``python -m src.cli.ingest`` - bootstrap, search and inspect the vector
  index, or trigger a bootstrap on a deployed instance.
"""
