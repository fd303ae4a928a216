"""Service layer exports."""

from .perplexity_client import PerplexityClient

__all__ = ["PerplexityClient"]
