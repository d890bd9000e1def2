"""ralph - a dispatcher for AI provider agents."""

__version__ = "0.3.0"
