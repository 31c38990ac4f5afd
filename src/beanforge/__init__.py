"""
beanforge: Bean factory with definition inheritance, cycle-safe wiring and property binding.

Public API exports for the beanforge package.
"""

# Application exports
from beanforge.application.bean_factory import AbstractBeanFactory
from beanforge.application.bean_wrapper import BeanWrapper
from beanforge.application.listable_bean_factory import ListableBeanFactory

# Configuration exports
from beanforge.config import BeanFactorySettings, get_settings

# Domain exports
from beanforge.domain.enums import DefinitionKind
from beanforge.domain.exceptions import (
    BeanCreationError,
    BeanDefinitionStoreError,
    BeanIsNotAFactoryError,
    BeanNotOfRequiredTypeError,
    BeansError,
    FatalBeanError,
    InvalidPropertyValuesError,
    MethodInvocationError,
    NoSuchBeanDefinitionError,
    NotWritablePropertyError,
    NullValueInNestedPathError,
    PropertyAccessError,
    PropertyAccessErrors,
    PropertyVetoError,
    TypeMismatchError,
)
from beanforge.domain.interfaces import BeanFactoryAware, FactoryBean, InitializingBean
from beanforge.domain.models import (
    ChildBeanDefinition,
    ManagedList,
    ManagedMap,
    MutablePropertyValues,
    PropertyValue,
    RootBeanDefinition,
    RuntimeBeanReference,
)

__version__ = "0.1.0"

__all__ = [
    # Factories
    "AbstractBeanFactory",
    "ListableBeanFactory",
    "BeanWrapper",
    # Configuration
    "BeanFactorySettings",
    "get_settings",
    # Definitions and values
    "DefinitionKind",
    "RootBeanDefinition",
    "ChildBeanDefinition",
    "PropertyValue",
    "MutablePropertyValues",
    "RuntimeBeanReference",
    "ManagedList",
    "ManagedMap",
    # Capabilities
    "InitializingBean",
    "BeanFactoryAware",
    "FactoryBean",
    # Exceptions
    "BeansError",
    "FatalBeanError",
    "BeanDefinitionStoreError",
    "BeanCreationError",
    "NoSuchBeanDefinitionError",
    "BeanNotOfRequiredTypeError",
    "BeanIsNotAFactoryError",
    "NotWritablePropertyError",
    "NullValueInNestedPathError",
    "PropertyAccessError",
    "TypeMismatchError",
    "MethodInvocationError",
    "PropertyVetoError",
    "InvalidPropertyValuesError",
    "PropertyAccessErrors",
]
