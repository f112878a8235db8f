"""Renderers for repository records: terminal, JSON, YAML."""
