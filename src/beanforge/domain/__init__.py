"""
Domain layer - Bean definitions, values and the error taxonomy.

This layer contains the declarative model the factory works from.
It has no dependencies on other layers.
"""

from .enums import DefinitionKind
from .exceptions import (
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
from .interfaces import (
    BeanFactoryAware,
    Converter,
    FactoryBean,
    IBeanFactory,
    IListableBeanFactory,
    InitializingBean,
    IPropertyValues,
    PropertyChangeListener,
    PropertyValuesValidator,
)
from .models import (
    AbstractBeanDefinition,
    ChildBeanDefinition,
    ManagedList,
    ManagedMap,
    MutablePropertyValues,
    PropertyChangeEvent,
    PropertyDescriptor,
    PropertyValue,
    RootBeanDefinition,
    RuntimeBeanReference,
    resolve_class_name,
)

__all__ = [
    # Enums
    "DefinitionKind",
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
    # Interfaces
    "IPropertyValues",
    "IBeanFactory",
    "IListableBeanFactory",
    "InitializingBean",
    "BeanFactoryAware",
    "FactoryBean",
    "PropertyValuesValidator",
    "Converter",
    "PropertyChangeListener",
    # Models
    "PropertyValue",
    "MutablePropertyValues",
    "RuntimeBeanReference",
    "ManagedList",
    "ManagedMap",
    "AbstractBeanDefinition",
    "RootBeanDefinition",
    "ChildBeanDefinition",
    "PropertyChangeEvent",
    "PropertyDescriptor",
    "resolve_class_name",
]
