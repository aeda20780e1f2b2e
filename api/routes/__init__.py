"""API route handlers."""

from api.routes import applications, catalogue, health

__all__ = ["applications", "catalogue", "health"]
