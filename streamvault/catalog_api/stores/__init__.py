"""Catalog persistence and in-memory stores."""
