"""Core business logic layer.

Subpackages:
- insights: kitchen analysis requests and the report lifecycle
"""
__all__ = ["insights"]
