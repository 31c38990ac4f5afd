"""
Infrastructure layer - Helpers built on the core factories.

It depends only on the Domain layer.
"""

from . import testing

__all__ = [
    "testing",
]
