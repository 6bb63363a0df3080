"""Sitemap and meta tag rendering."""
