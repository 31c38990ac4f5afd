"""
Application layer - Property binding and object graph construction.

This layer wires beans from the declarative model.
It depends only on the Domain layer and configuration.
"""

from .bean_factory import AbstractBeanFactory
from .bean_wrapper import BeanWrapper
from .converters import (
    BooleanConverter,
    ConverterRegistry,
    DateConverter,
    Locale,
    NumberConverter,
    Properties,
    default_converter_registry,
    find_default_converter,
)
from .in_flight import InFlightBeans
from .listable_bean_factory import ListableBeanFactory
from .property_change import PropertyChangeSupport, VetoableChangeSupport
from .singleton_cache import SingletonCache
from .value_resolver import PropertyValueResolver

__all__ = [
    "AbstractBeanFactory",
    "ListableBeanFactory",
    "BeanWrapper",
    "PropertyValueResolver",
    "SingletonCache",
    "InFlightBeans",
    "PropertyChangeSupport",
    "VetoableChangeSupport",
    "ConverterRegistry",
    "default_converter_registry",
    "find_default_converter",
    "BooleanConverter",
    "NumberConverter",
    "DateConverter",
    "Locale",
    "Properties",
]
