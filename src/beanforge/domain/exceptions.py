from typing import TYPE_CHECKING, Any, Iterator, List, Optional, Type

from beanforge.domain.interfaces import FactoryBean

if TYPE_CHECKING:
    from beanforge.domain.models import PropertyChangeEvent


def _type_name(cls: Any) -> str:
    return getattr(cls, "__name__", repr(cls))


class BeansError(Exception):
    """Base exception for bean factory and property binding errors."""


class FatalBeanError(BeansError):
    """Unrecoverable error: never collected, always propagated to the caller."""


class BeanDefinitionStoreError(FatalBeanError):
    """Raised when the registered definitions are inconsistent.

    This occurs when:
    - A child definition names a parent that is not registered.
    - Parent links form a cycle or exceed the configured depth.
    - A reference to another bean cannot be resolved while wiring.
    - A managed list cannot be coerced into a typed sequence property.
    """


class BeanCreationError(FatalBeanError):
    """Raised when a bean cannot be created or initialized.

    Attributes:
        bean_name: Name of the bean that failed.
    """

    def __init__(self, bean_name: str, message: str) -> None:
        self.bean_name = bean_name
        super().__init__(f"Error creating bean '{bean_name}': {message}")


class NoSuchBeanDefinitionError(BeansError):
    """Raised when no definition exists for the requested name.

    Attributes:
        bean_name: The name that was looked up.
    """

    def __init__(self, bean_name: Optional[str], message: Optional[str] = None) -> None:
        self.bean_name = bean_name
        text = f"No bean named '{bean_name}' is defined"
        if message:
            text += f": {message}"
        super().__init__(text)


class BeanNotOfRequiredTypeError(BeansError):
    """Raised when a bean is not an instance of the type the caller asked for.

    Attributes:
        bean_name: Name of the bean.
        required_type: The type the caller required.
        actual_instance: The instance that was found.
    """

    def __init__(self, bean_name: str, required_type: Type, actual_instance: Any) -> None:
        self.bean_name = bean_name
        self.required_type = required_type
        self.actual_instance = actual_instance
        super().__init__(
            f"Bean named '{bean_name}' must be of type {_type_name(required_type)}, "
            f"but was actually of type {type(actual_instance).__name__}"
        )

    @property
    def actual_type(self) -> Type:
        return type(self.actual_instance)


class BeanIsNotAFactoryError(BeanNotOfRequiredTypeError):
    """Raised when a factory dereference is requested for a bean that is not a factory."""

    def __init__(self, bean_name: str, actual_instance: Any) -> None:
        super().__init__(bean_name, FactoryBean, actual_instance)


class NotWritablePropertyError(FatalBeanError):
    """Raised when binding a property that has no setter.

    Attributes:
        property_name: The property path that was written.
        bean_class: Class of the target object.
    """

    def __init__(self, property_name: str, bean_class: Type) -> None:
        self.property_name = property_name
        self.bean_class = bean_class
        super().__init__(f"Property '{property_name}' of class {_type_name(bean_class)} is not writable")


class NullValueInNestedPathError(FatalBeanError):
    """Raised when a nested property path traverses a ``None`` value.

    Attributes:
        bean_class: Class of the object holding the ``None`` property.
        property_name: The property that evaluated to ``None``.
    """

    def __init__(self, bean_class: Type, property_name: str) -> None:
        self.bean_class = bean_class
        self.property_name = property_name
        super().__init__(
            f"Value of nested property '{property_name}' is None in class {_type_name(bean_class)}"
        )


class PropertyAccessError(BeansError):
    """Recoverable property write failure.

    Collected by batch binding instead of aborting it.

    Attributes:
        event: The change that was attempted, if it could be built.
    """

    def __init__(self, message: str, event: Optional["PropertyChangeEvent"] = None) -> None:
        self.event = event
        super().__init__(message)

    @property
    def property_name(self) -> Optional[str]:
        return self.event.property_name if self.event is not None else None


class TypeMismatchError(PropertyAccessError):
    """Raised when a value cannot be converted to the declared property type.

    Attributes:
        required_type: The declared type of the property.
    """

    def __init__(self, event: "PropertyChangeEvent", required_type: Any, reason: Optional[str] = None) -> None:
        self.required_type = required_type
        message = (
            f"Cannot convert value {event.new_value!r} for property '{event.property_name}' "
            f"to required type {_type_name(required_type)}"
        )
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message, event)


class MethodInvocationError(PropertyAccessError):
    """Raised when a setter or an invoked method raises."""

    def __init__(self, message: str, event: Optional["PropertyChangeEvent"] = None) -> None:
        super().__init__(message, event)


class PropertyVetoError(PropertyAccessError):
    """Raised by a vetoable change listener to reject a property change."""


class InvalidPropertyValuesError(BeansError):
    """Raised by a property values validator when required values are missing.

    Attributes:
        missing_fields: Names of the properties that failed validation.
    """

    def __init__(self, missing_fields: List[str], message: Optional[str] = None) -> None:
        self.missing_fields = list(missing_fields)
        super().__init__(message or f"Missing required properties: {', '.join(self.missing_fields)}")


class PropertyAccessErrors(BeansError):
    """Aggregate of the recoverable failures of one batch binding.

    Attributes:
        wrapped_instance: The object the batch was applied to.
        errors: Every collected property failure, in binding order.
        missing_fields: Fields reported by the validator.
    """

    def __init__(
        self,
        wrapped_instance: Any,
        errors: List[PropertyAccessError],
        missing_fields: Optional[List[str]] = None,
    ) -> None:
        self.wrapped_instance = wrapped_instance
        self.errors = list(errors)
        self.missing_fields = list(missing_fields or [])
        details = "; ".join(str(error) for error in self.errors)
        message = f"{self.error_count} error(s) binding properties of {type(wrapped_instance).__name__}"
        if details:
            message += f": {details}"
        if self.missing_fields:
            message += f"; missing fields: {', '.join(self.missing_fields)}"
        super().__init__(message)

    @property
    def error_count(self) -> int:
        return len(self.errors) + len(self.missing_fields)

    def get_property_error(self, property_name: str) -> Optional[PropertyAccessError]:
        for error in self.errors:
            if error.property_name == property_name:
                return error
        return None

    def __iter__(self) -> Iterator[PropertyAccessError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return self.error_count
