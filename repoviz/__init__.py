"""repoviz: lexical static analysis of multi-language repositories."""

__version__ = "0.1.0"

__all__ = ["__version__"]
