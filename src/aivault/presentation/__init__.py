"""Presentation layer for the AI Vault."""
