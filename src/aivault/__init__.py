"""The AI Vault: room/puzzle progression engine with a console front end."""

__version__ = "0.1.0"
