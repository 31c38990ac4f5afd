from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Protocol, Type, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from beanforge.domain.models import PropertyChangeEvent, PropertyValue

T = TypeVar("T")

Converter = Callable[[str], Any]
"""Turns the text form of a value into an object of the target type.

Raises ValueError (or a pydantic ValidationError) when the text is invalid.
"""

PropertyChangeListener = Callable[["PropertyChangeEvent"], None]
"""Receives property change events. Vetoable listeners raise PropertyVetoError to reject."""


class IPropertyValues(ABC):
    """Abstract read access to an ordered set of property bindings."""

    @abstractmethod
    def get_property_values(self) -> List["PropertyValue"]:
        """Return all bindings in order."""

    @abstractmethod
    def get_property_value(self, property_name: str) -> Optional["PropertyValue"]:
        """Return the binding for a property name, or None."""

    @abstractmethod
    def contains(self, property_name: str) -> bool:
        """Return whether a binding exists for the property name."""


class IBeanFactory(ABC):
    """Abstract interface for looking up beans by name."""

    @abstractmethod
    def get_bean(self, name: str, required_type: Optional[Type[T]] = None) -> Any:
        """Return the bean registered under a name or alias.

        Args:
            name: Bean name or alias, optionally prefixed with the factory dereference marker.
            required_type: Type the bean must be an instance of.

        Raises:
            NoSuchBeanDefinitionError: If no such bean exists.
            BeanNotOfRequiredTypeError: If the bean is not of the required type.
        """

    @abstractmethod
    def is_singleton(self, name: str) -> bool:
        """Return whether the bean is a shared instance.

        Raises:
            NoSuchBeanDefinitionError: If no such bean exists.
        """

    @abstractmethod
    def get_aliases(self, name: str) -> List[str]:
        """Return the aliases registered for a canonical bean name."""


class IListableBeanFactory(IBeanFactory):
    """Bean factory that can enumerate its bean definitions."""

    @abstractmethod
    def get_bean_definition_count(self) -> int:
        """Return the number of beans defined in this factory (parents excluded)."""

    @abstractmethod
    def get_bean_definition_names(self, bean_type: Optional[Type] = None) -> List[str]:
        """Return the names of the defined beans.

        Args:
            bean_type: If given, only names whose class is a subclass of this type.
        """


@runtime_checkable
class InitializingBean(Protocol):
    """Capability of beans that validate or finish setup once every property is bound."""

    def after_properties_set(self) -> None: ...


@runtime_checkable
class BeanFactoryAware(Protocol):
    """Capability of beans that need a reference to the factory that created them."""

    def set_bean_factory(self, bean_factory: IBeanFactory) -> None: ...


@runtime_checkable
class FactoryBean(Protocol):
    """Capability of beans that produce another object.

    Looking up such a bean returns the product of ``get_object``; prefixing the
    name with the dereference marker returns the factory itself.
    """

    def get_object(self) -> Any: ...

    def is_singleton(self) -> bool: ...

    def get_property_values(self) -> Optional[IPropertyValues]: ...


@runtime_checkable
class PropertyValuesValidator(Protocol):
    """Pre-validation hook for batch property binding.

    Raises InvalidPropertyValuesError listing the offending fields.
    """

    def validate_property_values(self, property_values: IPropertyValues) -> None: ...
