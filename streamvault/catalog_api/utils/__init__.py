"""Helpers for filesystem paths and thumbnails."""
