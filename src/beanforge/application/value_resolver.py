"""Application layer - Resolution of raw property values to live objects."""

import logging
from typing import Any, Callable, List

from beanforge.application.bean_wrapper import BeanWrapper
from beanforge.application.in_flight import InFlightBeans
from beanforge.application.introspection import sequence_element_type
from beanforge.domain import (
    BeanDefinitionStoreError,
    BeansError,
    IPropertyValues,
    ManagedList,
    ManagedMap,
    MutablePropertyValues,
    PropertyAccessError,
    PropertyValue,
    RuntimeBeanReference,
)

logger = logging.getLogger(__name__)

BeanLookup = Callable[[str, InFlightBeans], Any]
"""Looks up a bean by name while reusing the in-flight map of the current lookup."""


class PropertyValueResolver:
    """Turns the raw bindings of a definition into values ready to bind.

    Bean references become live beans, managed collections become new plain
    collections with their references resolved, and everything else passes
    through. The stored bindings are never modified.

    Attributes:
        _bean_lookup: Callback into the owning factory for referenced beans.
    """

    def __init__(self, bean_lookup: BeanLookup) -> None:
        """Initialize the resolver.

        Args:
            bean_lookup: Returns the bean for a name, using the given in-flight map.
        """
        self._bean_lookup = bean_lookup

    def resolve_property_values(
        self,
        bean_name: str,
        wrapper: BeanWrapper,
        property_values: IPropertyValues,
        in_flight: InFlightBeans,
    ) -> MutablePropertyValues:
        """Resolve every binding of a definition for one new instance.

        Args:
            bean_name: Name of the bean being created, for error messages.
            wrapper: Wrapper around the new instance, used for declared types and conversion.
            property_values: Bindings as stored in the definition.
            in_flight: In-flight map of the current top-level lookup.

        Returns:
            A new MutablePropertyValues holding the resolved values.

        Raises:
            BeanDefinitionStoreError: If a referenced bean cannot be obtained, or a
                managed list cannot be converted to the declared sequence type.

        Example:
            >>> pvs = MutablePropertyValues({"owner": RuntimeBeanReference(bean_name="kerry")})
            >>> resolved = resolver.resolve_property_values("rex", wrapper, pvs, InFlightBeans())
            >>> resolved.get_property_value("owner").value is factory.get_bean("kerry")
            True
        """
        resolved = MutablePropertyValues()
        for pv in property_values.get_property_values():
            value = self.resolve_value_if_necessary(bean_name, pv.name, pv.value, in_flight)
            if isinstance(pv.value, ManagedList):
                value = self._coerce_sequence(bean_name, wrapper, pv.name, value)
            resolved.add_property_value(PropertyValue(name=pv.name, value=value))
        return resolved

    def resolve_value_if_necessary(
        self,
        bean_name: str,
        property_name: str,
        value: Any,
        in_flight: InFlightBeans,
    ) -> Any:
        """Resolve one raw value, recursing into managed collections."""
        if isinstance(value, RuntimeBeanReference):
            return self._resolve_reference(bean_name, property_name, value, in_flight)
        if isinstance(value, ManagedList):
            return [self.resolve_value_if_necessary(bean_name, property_name, item, in_flight) for item in value]
        if isinstance(value, ManagedMap):
            return {
                key: self.resolve_value_if_necessary(bean_name, property_name, item, in_flight)
                for key, item in value.items()
            }
        return value

    def _resolve_reference(
        self,
        bean_name: str,
        property_name: str,
        reference: RuntimeBeanReference,
        in_flight: InFlightBeans,
    ) -> Any:
        logger.debug(
            "Resolving reference from property '%s' in bean '%s' to bean '%s'",
            property_name,
            bean_name,
            reference.bean_name,
        )
        try:
            return self._bean_lookup(reference.bean_name, in_flight)
        except BeanDefinitionStoreError:
            raise
        except BeansError as e:
            raise BeanDefinitionStoreError(
                f"Can't resolve reference to bean '{reference.bean_name}' "
                f"while setting property '{property_name}' on bean '{bean_name}': {e}"
            ) from e

    def _coerce_sequence(self, bean_name: str, wrapper: BeanWrapper, property_name: str, items: List[Any]) -> Any:
        """Convert a resolved managed list to the declared ``tuple[X, ...]`` or ``list[X]`` type."""
        required_type = wrapper.get_property_type(property_name)
        if sequence_element_type(required_type) is None:
            return items
        try:
            return wrapper.convert_if_necessary(items, required_type, property_name)
        except PropertyAccessError as e:
            raise BeanDefinitionStoreError(
                f"Cannot convert list for property '{property_name}' on bean '{bean_name}': {e}"
            ) from e
