"""Mermaid diagram workspace with live preview and an AI drafting assistant."""

__version__ = "0.1.0"
