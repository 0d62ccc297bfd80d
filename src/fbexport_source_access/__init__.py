"""Extraction core for the FreshBooks export service.

Token coordination, the endpoint registry, the paging fetch engine and the
per-resource record normalizers, exposed to callers as Temporal activities.
"""
