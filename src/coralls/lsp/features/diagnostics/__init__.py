"""Pattern-rule diagnostics."""
