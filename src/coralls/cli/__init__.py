"""Command line interface for the Coral language server."""
