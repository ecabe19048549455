"""Helpi - a Telegram gateway to interchangeable LLM providers."""

__version__ = "1.0.0"
