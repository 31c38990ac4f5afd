"""
Configuration for bean factories and property binders.

Values can be overridden through ``BEANFORGE_``-prefixed environment variables,
e.g. ``BEANFORGE_MAX_PARENT_DEPTH=16``.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BeanFactorySettings(BaseSettings):
    """Tunable constants of the bean factory.

    Attributes:
        factory_bean_prefix: Marker prefix requesting a factory bean itself rather than its product.
        nested_property_separator: Separator between the segments of a nested property path.
        max_parent_depth: Maximum number of parent hops from a child definition to its root.
        event_propagation_enabled: Default for property change events on new bean wrappers.
    """

    model_config = SettingsConfigDict(env_prefix="BEANFORGE_", frozen=True)

    factory_bean_prefix: str = Field(default="&", min_length=1, description="Factory dereference marker")
    nested_property_separator: str = Field(default=".", min_length=1, description="Nested path separator")
    max_parent_depth: int = Field(default=64, ge=1, description="Maximum parent definition hops")
    event_propagation_enabled: bool = Field(default=False, description="Fire property change events")


@lru_cache()
def get_settings() -> BeanFactorySettings:
    """Return the shared default settings, read once from the environment."""
    return BeanFactorySettings()
