"""
Testing utilities module.

Provides factories over pre-built objects, for tests and as parent factories.
"""

from .utilities import StaticListableBeanFactory, create_static_bean_factory

__all__ = [
    "StaticListableBeanFactory",
    "create_static_bean_factory",
]
