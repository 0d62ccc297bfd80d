"""Temporal worker runner for the FreshBooks extraction activities."""
