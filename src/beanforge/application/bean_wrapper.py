"""Application layer - Reflective property access on a target object."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from beanforge.application.converters import ConverterRegistry, default_converter_registry, find_default_converter
from beanforge.application.introspection import (
    get_property_descriptors,
    instantiate_class,
    is_assignable,
    is_primitive,
    is_subtype,
    sequence_element_type,
    unwrap_optional,
)
from beanforge.application.property_change import PropertyChangeSupport, VetoableChangeSupport
from beanforge.config import BeanFactorySettings, get_settings
from beanforge.domain import (
    Converter,
    FatalBeanError,
    InvalidPropertyValuesError,
    IPropertyValues,
    MethodInvocationError,
    MutablePropertyValues,
    NotWritablePropertyError,
    NullValueInNestedPathError,
    PropertyAccessError,
    PropertyAccessErrors,
    PropertyChangeEvent,
    PropertyChangeListener,
    PropertyDescriptor,
    PropertyValue,
    PropertyValuesValidator,
    PropertyVetoError,
    TypeMismatchError,
)

logger = logging.getLogger(__name__)


class BeanWrapper:
    """Gets and sets properties of a wrapped object, converting values as needed.

    Supports nested property paths (``"owner.address.city"``), custom converters
    per type or per property path, batch binding with error aggregation and
    optional property change events.

    Attributes:
        _object: The wrapped object.
        _settings: Separator and event defaults.
        _fallback_converters: Converters consulted after custom and built-in ones.
        _type_converters: Custom converters by declared type.
        _path_converters: Custom converters by property name.
        _nested_wrappers: Wrappers for nested objects, by object identity.

    Example:
        >>> wrapper = BeanWrapper(Person())
        >>> wrapper.set_property_value("age", "42")
        >>> wrapper.get_property_value("age")
        42
    """

    def __init__(
        self,
        target: Any,
        event_propagation_enabled: Optional[bool] = None,
        settings: Optional[BeanFactorySettings] = None,
        fallback_converters: Optional[ConverterRegistry] = None,
    ) -> None:
        """Wrap an object, or instantiate and wrap a class.

        Args:
            target: Object to wrap, or a class to instantiate with no arguments.
            event_propagation_enabled: Fire change events; defaults to the settings value.
            settings: Factory settings; defaults to the shared settings.
            fallback_converters: Fallback converter registry; defaults to the shared registry.

        Raises:
            FatalBeanError: If the target is None or the class cannot be instantiated.
        """
        self._settings = settings or get_settings()
        self._fallback_converters = fallback_converters or default_converter_registry
        self._type_converters: Dict[Any, Converter] = {}
        self._path_converters: Dict[str, Converter] = {}
        self._nested_wrappers: Dict[int, "BeanWrapper"] = {}
        self._vetoable_change_support: Optional[VetoableChangeSupport] = None
        self._property_change_support: Optional[PropertyChangeSupport] = None
        self._event_propagation_enabled = False
        if isinstance(target, type):
            target = instantiate_class(target)
        self._object: Any = None
        self.set_wrapped_instance(target)
        if event_propagation_enabled is None:
            event_propagation_enabled = self._settings.event_propagation_enabled
        self.event_propagation_enabled = event_propagation_enabled

    # ------------------------------------------------------------------
    # Wrapped instance
    # ------------------------------------------------------------------

    @property
    def wrapped_instance(self) -> Any:
        return self._object

    @property
    def wrapped_class(self) -> type:
        return type(self._object)

    def set_wrapped_instance(self, target: Any) -> None:
        """Switch to another target object, dropping nested wrappers and event listeners."""
        if target is None:
            raise FatalBeanError("Cannot set BeanWrapper target to None")
        self._object = target
        self._nested_wrappers.clear()
        self._vetoable_change_support = None
        self._property_change_support = None
        self.event_propagation_enabled = self._event_propagation_enabled

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_property_descriptors(self) -> List[PropertyDescriptor]:
        descriptors = dict(get_property_descriptors(self.wrapped_class))
        for name in getattr(self._object, "__dict__", {}):
            if not name.startswith("_") and name not in descriptors:
                descriptors[name] = PropertyDescriptor(name=name)
        return list(descriptors.values())

    def _find_descriptor(self, property_name: str) -> Optional[PropertyDescriptor]:
        descriptor = get_property_descriptors(self.wrapped_class).get(property_name)
        if descriptor is None and not property_name.startswith("_"):
            if property_name in getattr(self._object, "__dict__", {}):
                descriptor = PropertyDescriptor(name=property_name)
        return descriptor

    def get_property_descriptor(self, property_name: str) -> PropertyDescriptor:
        """Return the descriptor of a property, navigating nested paths.

        Raises:
            FatalBeanError: If the property does not exist.
        """
        if self._is_nested(property_name):
            nested = self._get_wrapper_for_nested_property(property_name)
            return nested.get_property_descriptor(self._final_path(property_name))
        descriptor = self._find_descriptor(property_name)
        if descriptor is None:
            raise FatalBeanError(f"No property '{property_name}' found on class {self.wrapped_class.__name__}")
        return descriptor

    def get_property_type(self, property_name: str) -> Optional[Any]:
        """Return the declared type of a property, or None if it does not exist."""
        try:
            return self.get_property_descriptor(property_name).property_type
        except FatalBeanError:
            return None

    def is_readable_property(self, property_name: str) -> bool:
        try:
            return self.get_property_descriptor(property_name).readable
        except FatalBeanError:
            return False

    def is_writable_property(self, property_name: str) -> bool:
        try:
            return self.get_property_descriptor(property_name).writable
        except FatalBeanError:
            return False

    # ------------------------------------------------------------------
    # Custom converters
    # ------------------------------------------------------------------

    def register_custom_converter(
        self,
        required_type: Optional[Any],
        property_path: Optional[str],
        converter: Converter,
    ) -> None:
        """Register a converter for every property of a type, or for one property path.

        Args:
            required_type: Declared type the converter produces. May be None with a path.
            property_path: Property (or nested path) the converter is limited to.
            converter: Callable turning text into a value.

        Raises:
            ValueError: If neither a type nor a path is given, or the type does not fit the property.
        """
        if property_path is not None:
            nested = self._get_wrapper_for_nested_property(property_path)
            nested._register_custom_converter(required_type, self._final_path(property_path), converter)
        else:
            self._register_custom_converter(required_type, None, converter)

    def _register_custom_converter(
        self,
        required_type: Optional[Any],
        property_name: Optional[str],
        converter: Converter,
    ) -> None:
        if property_name is not None:
            descriptor = self.get_property_descriptor(property_name)
            if required_type is not None and not is_subtype(required_type, descriptor.property_type):
                raise ValueError(
                    f"Types do not match: required={required_type!r}, found={descriptor.property_type!r}"
                )
            self._path_converters[property_name] = converter
        else:
            if required_type is None:
                raise ValueError("No property path and no required type specified")
            self._type_converters[required_type] = converter

    def find_custom_converter(self, required_type: Optional[Any], property_path: Optional[str]) -> Optional[Converter]:
        """Return the custom converter for a property path or declared type, if registered."""
        if property_path is not None:
            nested = self._get_wrapper_for_nested_property(property_path)
            return nested._find_custom_converter(required_type, self._final_path(property_path))
        return self._find_custom_converter(required_type, None)

    def _find_custom_converter(self, required_type: Optional[Any], property_name: Optional[str]) -> Optional[Converter]:
        if property_name is not None:
            converter = self._path_converters.get(property_name)
            if converter is not None:
                return converter
            if required_type is None:
                descriptor = self._find_descriptor(property_name)
                required_type = descriptor.property_type if descriptor is not None else None
        if required_type is None:
            return None
        for key in (required_type, unwrap_optional(required_type)):
            try:
                converter = self._type_converters.get(key)
            except TypeError:
                continue
            if converter is not None:
                return converter
        return None

    # ------------------------------------------------------------------
    # Type conversion
    # ------------------------------------------------------------------

    def convert_if_necessary(
        self,
        value: Any,
        required_type: Any,
        property_name: Optional[str] = None,
        old_value: Any = None,
    ) -> Any:
        """Convert a value to a declared type.

        Only text is converted, and only when a custom converter applies or the
        text is not already of the required type. Converters are tried in order:
        custom (path, then type), built-in defaults, then the fallback registry.
        Lists and tuples bound to ``list[X]`` or ``tuple[X, ...]`` are converted
        element by element into the declared container.

        Args:
            value: The raw value.
            required_type: Declared type of the target property.
            property_name: Property name, for path-specific converters and error messages.
            old_value: Current value, for error messages.

        Returns:
            The converted value.

        Raises:
            TypeMismatchError: If conversion fails or the result does not fit the type.
        """
        if value is None:
            return None
        name = property_name or ""
        converter = self._find_custom_converter(required_type, property_name)
        if isinstance(value, str) and (converter is not None or not is_assignable(value, required_type)):
            if converter is None:
                target_type = unwrap_optional(required_type)
                converter = find_default_converter(target_type) or self._fallback_converters.find(target_type)
            if converter is not None:
                logger.debug("Converting text to %r for property '%s'", required_type, name)
                try:
                    value = converter(value)
                except (ValueError, TypeError) as e:
                    event = PropertyChangeEvent(
                        source=self._object, property_name=name, old_value=old_value, new_value=value
                    )
                    raise TypeMismatchError(event, required_type, str(e)) from e
        if isinstance(value, (list, tuple)):
            value = self._convert_elements_if_necessary(value, required_type, name)
        if not is_assignable(value, required_type):
            event = PropertyChangeEvent(source=self._object, property_name=name, old_value=old_value, new_value=value)
            raise TypeMismatchError(event, required_type)
        return value

    def _convert_elements_if_necessary(self, items: Union[list, tuple], required_type: Any, name: str) -> Any:
        """Convert every element for ``list[X]`` and ``tuple[X, ...]`` declarations.

        The original sequence is returned when no element changed and its
        container type already matches.
        """
        declared = sequence_element_type(required_type)
        if declared is None:
            return items
        container, element_type = declared
        converted = [
            self.convert_if_necessary(item, element_type, f"{name}[{index}]") for index, item in enumerate(items)
        ]
        if type(items) is container and all(new is old for new, old in zip(converted, items)):
            return items
        return container(converted)

    # ------------------------------------------------------------------
    # Nested paths
    # ------------------------------------------------------------------

    @property
    def _separator(self) -> str:
        return self._settings.nested_property_separator

    def _is_nested(self, path: str) -> bool:
        return self._separator in path

    def _final_path(self, path: str) -> str:
        return path.rsplit(self._separator, 1)[-1]

    def _get_wrapper_for_nested_property(self, path: str) -> "BeanWrapper":
        head, separator, tail = path.partition(self._separator)
        if not separator:
            return self
        logger.debug("Navigating to property path '%s' of nested property '%s'", tail, head)
        return self._get_nested_wrapper(head)._get_wrapper_for_nested_property(tail)

    def _get_nested_wrapper(self, nested_property: str) -> "BeanWrapper":
        value = self.get_property_value(nested_property)
        if value is None:
            raise NullValueInNestedPathError(self.wrapped_class, nested_property)
        nested = self._nested_wrappers.get(id(value))
        if nested is None or nested.wrapped_instance is not value:
            logger.debug("Creating new nested BeanWrapper for property '%s'", nested_property)
            nested = BeanWrapper(
                value,
                event_propagation_enabled=False,
                settings=self._settings,
                fallback_converters=self._fallback_converters,
            )
            # Type converters are copied now; later registrations here do not reach the nested wrapper.
            for required_type, converter in self._type_converters.items():
                nested._register_custom_converter(required_type, None, converter)
            self._nested_wrappers[id(value)] = nested
        else:
            logger.debug("Using cached nested BeanWrapper for property '%s'", nested_property)
        return nested

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get_property_value(self, property_name: str) -> Any:
        """Read a property, navigating nested paths.

        Raises:
            NullValueInNestedPathError: If an intermediate value is None.
            FatalBeanError: If the property is missing, not readable, or its getter raises.
        """
        if self._is_nested(property_name):
            nested = self._get_wrapper_for_nested_property(property_name)
            return nested.get_property_value(self._final_path(property_name))
        descriptor = self._find_descriptor(property_name)
        if descriptor is None or not descriptor.readable:
            raise FatalBeanError(f"Cannot get property '{property_name}': not readable")
        try:
            return getattr(self._object, property_name)
        except AttributeError as e:
            # Only an unset plain attribute reads as None.
            if descriptor.accessor is None:
                return None
            raise FatalBeanError(f"Getter for property '{property_name}' threw exception: {e}") from e
        except Exception as e:
            raise FatalBeanError(f"Getter for property '{property_name}' threw exception: {e}") from e

    def get_indexed_property_value(self, property_name: str, index: Any) -> Any:
        """Read one element of a sequence or mapping property.

        Raises:
            FatalBeanError: If the property is not indexable or the index is missing.
        """
        container = self.get_property_value(property_name)
        try:
            return container[index]
        except (TypeError, LookupError) as e:
            raise FatalBeanError(f"Cannot get indexed property '{property_name}[{index!r}]': {e}") from e

    def invoke(self, method_name: str, *args: Any, **kwargs: Any) -> Any:
        """Call a method of the wrapped object.

        Raises:
            FatalBeanError: If there is no such method.
            MethodInvocationError: If the method raises.
        """
        method = getattr(self._object, method_name, None)
        if method is None or not callable(method):
            raise FatalBeanError(f"No method '{method_name}' on class {self.wrapped_class.__name__}")
        logger.debug("About to invoke method '%s'", method_name)
        try:
            return method(*args, **kwargs)
        except Exception as e:
            raise MethodInvocationError(f"Method '{method_name}' threw {type(e).__name__}: {e}") from e

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def set_property_value(self, property_name: Union[str, PropertyValue], value: Any = None) -> None:
        """Write one property, converting the value to its declared type.

        Args:
            property_name: Property name or nested path, or a PropertyValue.
            value: The value; ignored when a PropertyValue is given.

        Raises:
            NotWritablePropertyError: If the property has no setter.
            NullValueInNestedPathError: If a nested path traverses None.
            TypeMismatchError: If the value cannot be converted.
            PropertyVetoError: If a listener vetoes the change.
            MethodInvocationError: If the setter raises.
        """
        if isinstance(property_name, PropertyValue):
            pv = property_name
        else:
            pv = PropertyValue(name=property_name, value=value)
        if self._is_nested(pv.name):
            try:
                nested = self._get_wrapper_for_nested_property(pv.name)
            except NullValueInNestedPathError:
                raise
            except FatalBeanError as e:
                raise NotWritablePropertyError(pv.name, self.wrapped_class) from e
            nested.set_property_value(PropertyValue(name=self._final_path(pv.name), value=pv.value))
            return

        descriptor = self._find_descriptor(pv.name)
        if descriptor is None or not descriptor.writable:
            raise NotWritablePropertyError(pv.name, self.wrapped_class)

        old_value = None
        if self._event_propagation_enabled and descriptor.readable:
            try:
                old_value = getattr(self._object, pv.name)
            except Exception:
                logger.warning(
                    "Failed to read old value of property '%s' before property change", pv.name, exc_info=True
                )

        new_value = self.convert_if_necessary(pv.value, descriptor.property_type, pv.name, old_value)
        event = PropertyChangeEvent(
            source=self._object, property_name=pv.name, old_value=old_value, new_value=new_value
        )

        if is_primitive(descriptor.property_type) and (pv.value is None or pv.value == ""):
            raise TypeMismatchError(event, descriptor.property_type, "invalid value for primitive property")

        if self._event_propagation_enabled and self._vetoable_change_support is not None:
            self._vetoable_change_support.fire(event)

        logger.debug("About to set property '%s' on object of class %s", pv.name, self.wrapped_class.__name__)
        try:
            setattr(self._object, pv.name, new_value)
        except PropertyVetoError as e:
            if e.event is None:
                e.event = event
            raise
        except (TypeError, ValidationError) as e:
            raise TypeMismatchError(event, descriptor.property_type, str(e)) from e
        except Exception as e:
            raise MethodInvocationError(
                f"Setter for property '{pv.name}' threw {type(e).__name__}: {e}", event
            ) from e

        if self._event_propagation_enabled and self._property_change_support is not None:
            self._property_change_support.fire(event)

    def set_property_values(
        self,
        property_values: Union[IPropertyValues, Mapping[str, Any]],
        ignore_unknown: bool = False,
        validator: Optional[PropertyValuesValidator] = None,
    ) -> None:
        """Write many properties, collecting recoverable failures.

        Every binding is attempted. Successful writes stay applied even when
        others fail. Type mismatches, vetoes and setter failures are collected
        and raised together at the end.

        Args:
            property_values: Bindings to apply, as PropertyValues or a mapping.
            ignore_unknown: Skip properties that are not writable instead of failing.
            validator: Optional pre-validation hook; its missing fields join the aggregate.

        Raises:
            NotWritablePropertyError: If a property is not writable and ignore_unknown is False.
            PropertyAccessErrors: If any recoverable failure was collected.
        """
        if not isinstance(property_values, IPropertyValues):
            property_values = MutablePropertyValues(property_values)

        errors: List[PropertyAccessError] = []
        missing_fields: List[str] = []
        if validator is not None:
            try:
                validator.validate_property_values(property_values)
            except InvalidPropertyValuesError as e:
                missing_fields.extend(e.missing_fields)

        for pv in property_values.get_property_values():
            try:
                self.set_property_value(pv)
            except NotWritablePropertyError:
                if not ignore_unknown:
                    raise
                logger.debug("Ignoring unknown property '%s' of class %s", pv.name, self.wrapped_class.__name__)
            except PropertyAccessError as e:
                errors.append(e)

        if errors or missing_fields:
            raise PropertyAccessErrors(self._object, errors, missing_fields)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    @property
    def event_propagation_enabled(self) -> bool:
        return self._event_propagation_enabled

    @event_propagation_enabled.setter
    def event_propagation_enabled(self, enabled: bool) -> None:
        self._event_propagation_enabled = enabled
        if enabled and (self._vetoable_change_support is None or self._property_change_support is None):
            self._vetoable_change_support = VetoableChangeSupport(self._object)
            self._property_change_support = PropertyChangeSupport(self._object)

    def add_property_change_listener(
        self, listener: PropertyChangeListener, property_name: Optional[str] = None
    ) -> None:
        """Listen to applied changes; ignored while events are disabled."""
        if self._event_propagation_enabled and self._property_change_support is not None:
            self._property_change_support.add_listener(listener, property_name)

    def remove_property_change_listener(
        self, listener: PropertyChangeListener, property_name: Optional[str] = None
    ) -> None:
        if self._event_propagation_enabled and self._property_change_support is not None:
            self._property_change_support.remove_listener(listener, property_name)

    def add_vetoable_change_listener(
        self, listener: PropertyChangeListener, property_name: Optional[str] = None
    ) -> None:
        """Listen to proposed changes, which the listener may veto; ignored while events are disabled."""
        if self._event_propagation_enabled and self._vetoable_change_support is not None:
            self._vetoable_change_support.add_listener(listener, property_name)

    def remove_vetoable_change_listener(
        self, listener: PropertyChangeListener, property_name: Optional[str] = None
    ) -> None:
        if self._event_propagation_enabled and self._vetoable_change_support is not None:
            self._vetoable_change_support.remove_listener(listener, property_name)

    def __repr__(self) -> str:
        return (
            f"BeanWrapper(event_propagation_enabled={self._event_propagation_enabled}, "
            f"wrapping {self.wrapped_class.__name__})"
        )
