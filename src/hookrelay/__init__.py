"""hookrelay: verify bank webhooks and republish them on Redis pub/sub."""

__version__ = "0.1.0"
