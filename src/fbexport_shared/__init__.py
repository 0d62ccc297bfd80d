"""Shared infrastructure for the FreshBooks export service.

Provides the Temporal client connection factory, task queue constants,
and Pydantic boundary models used by the extraction activities and their callers.
"""
