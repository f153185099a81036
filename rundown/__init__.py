"""Ordered rundown documents: projects, items and elements."""
