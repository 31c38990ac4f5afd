"""Application layer - String to value converters used by the property binder.

Converters are plain callables taking the text form of a value and returning
the converted object. They raise ValueError for invalid text.
"""

import logging
import numbers
import threading
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Type, get_args, get_origin

from pydantic import PydanticUserError, TypeAdapter

from beanforge.domain import Converter, IPropertyValues, MutablePropertyValues, resolve_class_name

logger = logging.getLogger(__name__)

_COMMENT_MARKERS = "#!"


class Locale(NamedTuple):
    """Language, country and variant, as written in ``en_US_POSIX``."""

    language: str
    country: str = ""
    variant: str = ""

    def __str__(self) -> str:
        return "_".join(part for part in (self.language, self.country, self.variant) if part)


class Properties(Dict[str, str]):
    """String to string mapping read from ``key=value`` lines."""


def parse_properties(text: str) -> Properties:
    """Parse ``key=value`` lines into a Properties mapping.

    Keys and values may also be separated by ``:`` or whitespace. Blank lines
    and lines starting with ``#`` or ``!`` are skipped.
    """
    props = Properties()
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in _COMMENT_MARKERS:
            continue
        positions = [pos for pos in (line.find("="), line.find(":")) if pos != -1]
        if positions:
            pos = min(positions)
            key, value = line[:pos], line[pos + 1 :]
        else:
            parts = line.split(None, 1)
            key, value = parts[0], parts[1] if len(parts) > 1 else ""
        props[key.strip()] = value.strip()
    return props


def string_list_converter(text: str) -> List[str]:
    """Split a comma-delimited list, stripping whitespace around each item."""
    if not text.strip():
        return []
    return [item.strip() for item in text.split(",")]


def locale_converter(text: str) -> Optional[Locale]:
    parts = text.strip().split("_")
    language = parts[0] if parts else ""
    if not language:
        return None
    country = parts[1] if len(parts) > 1 else ""
    variant = parts[2] if len(parts) > 2 else ""
    return Locale(language, country, variant)


def properties_converter(text: str) -> Properties:
    return parse_properties(text)


def property_values_converter(text: str) -> MutablePropertyValues:
    return MutablePropertyValues(parse_properties(text))


def class_converter(text: str) -> Type:
    return resolve_class_name(text)


class BooleanConverter:
    """Accepts ``true``/``false`` in any case.

    Attributes:
        allow_empty: Convert blank text to None instead of failing.
    """

    def __init__(self, allow_empty: bool = False) -> None:
        self.allow_empty = allow_empty

    def __call__(self, text: str) -> Optional[bool]:
        if self.allow_empty and not text.strip():
            return None
        if text.lower() == "true":
            return True
        if text.lower() == "false":
            return False
        raise ValueError(f"Invalid boolean value [{text}]")


class NumberConverter:
    """Parses decimal text into a given number type.

    Group separators (``,``) are ignored. Fractions are rejected for integral types.

    Attributes:
        number_type: Target type, a subclass of numbers.Number.
        allow_empty: Convert blank text to None instead of failing.
    """

    def __init__(self, number_type: Type, allow_empty: bool = False) -> None:
        if not (isinstance(number_type, type) and issubclass(number_type, numbers.Number)):
            raise TypeError("Property class must be a subclass of numbers.Number")
        self.number_type = number_type
        self.allow_empty = allow_empty

    def __call__(self, text: str) -> Optional[numbers.Number]:
        if self.allow_empty and not text.strip():
            return None
        try:
            number = Decimal(text.strip().replace(",", ""))
        except InvalidOperation as e:
            raise ValueError(f"Cannot parse number [{text}]") from e
        if self.number_type is Decimal:
            return number
        if issubclass(self.number_type, numbers.Integral):
            if number != number.to_integral_value():
                raise ValueError(f"Cannot convert [{text}] to {self.number_type.__name__}")
            return self.number_type(int(number))
        return self.number_type(number)


class DateConverter:
    """Parses dates with a ``strptime`` format.

    Attributes:
        date_format: The ``strptime``/``strftime`` format.
        allow_empty: Convert blank text to None instead of failing.
    """

    def __init__(self, date_format: str, allow_empty: bool = False) -> None:
        self.date_format = date_format
        self.allow_empty = allow_empty

    def __call__(self, text: str) -> Optional[datetime]:
        if self.allow_empty and not text.strip():
            return None
        try:
            return datetime.strptime(text, self.date_format)
        except ValueError as e:
            raise ValueError(f"Could not parse date: {e}") from e

    def format(self, value: datetime) -> str:
        return value.strftime(self.date_format)


def _string_sequence_converter(container: Type) -> Converter:
    def convert(text: str) -> Any:
        return container(string_list_converter(text))

    return convert


def find_default_converter(required_type: Any) -> Optional[Converter]:
    """Return the built-in converter for a declared type, if there is one.

    Built-ins cover comma-delimited string lists and tuples, Locale, Properties,
    property values blocks and classes by dotted name.
    """
    origin = get_origin(required_type) or required_type
    args = get_args(required_type)
    if origin in (list, tuple) and all(arg in (str, Ellipsis) for arg in args):
        return _string_sequence_converter(origin)
    if origin is type:
        return class_converter
    if not isinstance(origin, type):
        return None
    if issubclass(origin, Locale):
        return locale_converter
    if issubclass(origin, Properties):
        return properties_converter
    if issubclass(origin, IPropertyValues) and issubclass(MutablePropertyValues, origin):
        return property_values_converter
    return None


def _enum_converter(enum_type: Type[Enum]) -> Converter:
    def convert(text: str) -> Enum:
        try:
            return enum_type[text]
        except KeyError:
            pass
        try:
            return enum_type(text)
        except ValueError as e:
            raise ValueError(f"[{text}] is not a member of {enum_type.__name__}") from e

    return convert


class ConverterRegistry:
    """Fallback converters consulted when no custom or built-in converter applies.

    Lookup order: converters registered for the exact type, enum members by
    name or value, then pydantic's lax coercion for the type.
    """

    def __init__(self) -> None:
        self._converters: Dict[Any, Converter] = {}
        self._adapters: Dict[Any, Optional[TypeAdapter]] = {}
        self._lock = threading.Lock()

    def register(self, required_type: Any, converter: Converter) -> None:
        with self._lock:
            self._converters[required_type] = converter

    def unregister(self, required_type: Any) -> None:
        with self._lock:
            self._converters.pop(required_type, None)

    def find(self, required_type: Any) -> Optional[Converter]:
        """Return a converter for the type, or None if the type cannot be coerced from text."""
        try:
            converter = self._converters.get(required_type)
        except TypeError:
            return None
        if converter is not None:
            return converter
        if isinstance(required_type, type) and issubclass(required_type, Enum):
            return _enum_converter(required_type)
        adapter = self._get_adapter(required_type)
        if adapter is None:
            return None
        return adapter.validate_python

    def _get_adapter(self, required_type: Any) -> Optional[TypeAdapter]:
        with self._lock:
            if required_type not in self._adapters:
                try:
                    self._adapters[required_type] = TypeAdapter(required_type)
                except PydanticUserError:
                    logger.debug("No text coercion available for type %r", required_type)
                    self._adapters[required_type] = None
            return self._adapters[required_type]


default_converter_registry = ConverterRegistry()
