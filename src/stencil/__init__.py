"""stencil: local project template manager."""

__version__ = "0.1.0"

__all__ = ["__version__"]
