"""Completion catalog and resolution."""
