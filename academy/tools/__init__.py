"""Operational tooling (CLI)."""
