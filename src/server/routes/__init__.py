"""Route registration helpers."""

from .entries import register_entry_routes
from .insights import register_insight_routes

__all__ = [
    "register_entry_routes",
    "register_insight_routes",
]
