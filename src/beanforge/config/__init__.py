"""Configuration settings for beanforge."""

from .settings import BeanFactorySettings, get_settings

__all__ = [
    "BeanFactorySettings",
    "get_settings",
]
