"""Plan comment formatting and reconciliation."""
