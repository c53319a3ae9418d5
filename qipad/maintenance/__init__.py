"""Maintenance Commands - operator tooling run outside the API process."""
