"""Application layer - Bean factory over an in-memory definition registry."""

import logging
from typing import Dict, List, Optional, Type

from beanforge.application.bean_factory import AbstractBeanFactory
from beanforge.config import BeanFactorySettings
from beanforge.domain import (
    AbstractBeanDefinition,
    BeanDefinitionStoreError,
    IBeanFactory,
    IListableBeanFactory,
    NoSuchBeanDefinitionError,
)

logger = logging.getLogger(__name__)


class ListableBeanFactory(AbstractBeanFactory, IListableBeanFactory):
    """Bean factory backed by an in-memory map of named definitions.

    Definitions are registered up front, before beans are looked up. The
    definition map itself is not locked.

    Attributes:
        _bean_definitions: Definitions by bean name, in registration order.

    Example:
        >>> factory = ListableBeanFactory()
        >>> factory.register_bean_definition(
        ...     "kerry", RootBeanDefinition(bean_class=Person, property_values={"name": "Kerry"})
        ... )
        >>> factory.register_bean_definition(
        ...     "rex",
        ...     RootBeanDefinition(bean_class=Dog, property_values={"owner": RuntimeBeanReference(bean_name="kerry")}),
        ... )
        >>> factory.get_bean("rex").owner is factory.get_bean("kerry")
        True
    """

    def __init__(
        self,
        parent_bean_factory: Optional[IBeanFactory] = None,
        settings: Optional[BeanFactorySettings] = None,
    ) -> None:
        """Initialize an empty factory.

        Args:
            parent_bean_factory: Optional factory to delegate unknown names to.
            settings: Factory settings; defaults to the shared settings.
        """
        super().__init__(parent_bean_factory, settings)
        self._bean_definitions: Dict[str, AbstractBeanDefinition] = {}

    def register_bean_definition(self, bean_name: str, definition: AbstractBeanDefinition) -> None:
        """Register a definition under a bean name.

        Registering an equal definition again is a no-op.

        Args:
            bean_name: Unique bean name.
            definition: Root or child definition.

        Raises:
            BeanDefinitionStoreError: If the name is empty or already holds a different definition.
        """
        if not bean_name:
            raise BeanDefinitionStoreError("Bean name must not be empty")
        existing = self._bean_definitions.get(bean_name)
        if existing is not None:
            if existing == definition:
                return
            raise BeanDefinitionStoreError(
                f"Cannot register definition for bean '{bean_name}': a different definition is already registered"
            )
        logger.debug("Registering definition for bean '%s': %r", bean_name, definition)
        self._bean_definitions[bean_name] = definition

    def get_bean_definition(self, bean_name: str) -> AbstractBeanDefinition:
        definition = self._bean_definitions.get(bean_name)
        if definition is None:
            raise NoSuchBeanDefinitionError(bean_name)
        return definition

    def contains_bean_definition(self, bean_name: str) -> bool:
        return bean_name in self._bean_definitions

    def get_bean_definition_count(self) -> int:
        return len(self._bean_definitions)

    def get_bean_definition_names(self, bean_type: Optional[Type] = None) -> List[str]:
        """Return bean names in registration order.

        Args:
            bean_type: If given, only names whose resolved class is a subclass of this type.

        Raises:
            BeanDefinitionStoreError: If filtering by type meets a broken parent chain.
        """
        if bean_type is None:
            return list(self._bean_definitions)
        return [
            name
            for name, definition in self._bean_definitions.items()
            if issubclass(
                definition.resolve_bean_class(self._lookup_definition, self._settings.max_parent_depth),
                bean_type,
            )
        ]

    def realize_all_singletons(self) -> None:
        """Create every singleton bean now instead of on first lookup.

        Intended to run once, after all definitions are registered.
        """
        for bean_name in self.get_bean_definition_names():
            if self.get_bean_definition(bean_name).is_singleton:
                singleton = self.get_bean(bean_name)
                logger.debug("Instantiated singleton '%s': %r", bean_name, singleton)

    def __repr__(self) -> str:
        names = ", ".join(self._bean_definitions)
        parent = f"; parent={self._parent_bean_factory!r}" if self._parent_bean_factory is not None else ""
        return f"ListableBeanFactory(defining beans [{names}]{parent})"
