"""Finance chat gateway: multi-provider LLM routing with circuit breaking and safe fallback."""

__version__ = "0.1.0"
