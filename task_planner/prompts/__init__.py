"""Prompty templates and loader."""
