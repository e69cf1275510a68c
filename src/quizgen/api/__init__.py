"""HTTP routers for the quiz generation service."""

from .quiz import router

__all__ = ["router"]
