"""Sitemap slug extraction and redirect table formatting."""
