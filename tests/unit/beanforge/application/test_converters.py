"""Unit tests for string to value converters."""

from collections import OrderedDict
from datetime import datetime
from decimal import Decimal
from enum import Enum

import pytest

from beanforge.application.converters import (
    BooleanConverter,
    ConverterRegistry,
    DateConverter,
    Locale,
    NumberConverter,
    Properties,
    find_default_converter,
    locale_converter,
    parse_properties,
    string_list_converter,
)
from beanforge.domain import IPropertyValues, MutablePropertyValues


class Color(Enum):
    RED = "red"
    GREEN = "green"


class TestSimpleConverters:
    """Test cases for the function converters."""

    def test_string_list(self):
        """Test splitting comma-delimited text."""
        assert string_list_converter("a, b ,c") == ["a", "b", "c"]
        assert string_list_converter("   ") == []

    def test_locale(self):
        """Test parsing language, country and variant."""
        assert locale_converter("en_US") == Locale("en", "US", "")
        assert locale_converter("de") == Locale("de")
        assert locale_converter("en_US_POSIX").variant == "POSIX"
        assert locale_converter("") is None

    def test_locale_str(self):
        """Test that Locale prints in language_COUNTRY form."""
        assert str(Locale("en", "GB")) == "en_GB"

    def test_parse_properties(self):
        """Test parsing key=value lines, skipping comments."""
        text = """
        # comment
        ! also a comment
        name=Rex
        age : 3
        color brown
        """
        props = parse_properties(text)

        assert isinstance(props, Properties)
        assert props == {"name": "Rex", "age": "3", "color": "brown"}


class TestBooleanConverter:
    """Test cases for BooleanConverter."""

    @pytest.mark.parametrize("text,expected", [("true", True), ("TRUE", True), ("false", False), ("False", False)])
    def test_valid_values(self, text, expected):
        """Test that true/false are accepted in any case."""
        assert BooleanConverter()(text) is expected

    def test_invalid_value(self):
        """Test that other text is rejected."""
        with pytest.raises(ValueError, match="Invalid boolean value"):
            BooleanConverter()("yes")

    def test_allow_empty(self):
        """Test that blank text becomes None when allowed."""
        assert BooleanConverter(allow_empty=True)("  ") is None
        with pytest.raises(ValueError):
            BooleanConverter()("")


class TestNumberConverter:
    """Test cases for NumberConverter."""

    def test_integer(self):
        """Test parsing integers with group separators."""
        assert NumberConverter(int)("1,000") == 1000

    def test_integer_rejects_fraction(self):
        """Test that fractions are rejected for integral types."""
        with pytest.raises(ValueError, match="Cannot convert"):
            NumberConverter(int)("1.5")

    def test_float(self):
        """Test parsing floats."""
        assert NumberConverter(float)("2.5") == 2.5

    def test_decimal(self):
        """Test that Decimal keeps exact digits."""
        assert NumberConverter(Decimal)("0.10") == Decimal("0.10")

    def test_invalid_text(self):
        """Test that non-numeric text is rejected."""
        with pytest.raises(ValueError, match="Cannot parse number"):
            NumberConverter(int)("ten")

    def test_allow_empty(self):
        """Test that blank text becomes None when allowed."""
        assert NumberConverter(int, allow_empty=True)("") is None

    def test_non_number_type(self):
        """Test that the target must be a number type."""
        with pytest.raises(TypeError, match="numbers.Number"):
            NumberConverter(str)


class TestDateConverter:
    """Test cases for DateConverter."""

    def test_parse_and_format(self):
        """Test parsing with a format and formatting back."""
        converter = DateConverter("%Y-%m-%d")
        value = converter("2024-01-31")
        assert value == datetime(2024, 1, 31)
        assert converter.format(value) == "2024-01-31"

    def test_invalid_date(self):
        """Test that text not matching the format is rejected."""
        with pytest.raises(ValueError, match="Could not parse date"):
            DateConverter("%Y-%m-%d")("31/01/2024")

    def test_allow_empty(self):
        """Test that blank text becomes None when allowed."""
        assert DateConverter("%Y", allow_empty=True)(" ") is None


class TestFindDefaultConverter:
    """Test cases for the built-in converter lookup."""

    def test_string_list_and_tuple(self):
        """Test comma-delimited sequences of strings."""
        assert find_default_converter(list[str])("a,b") == ["a", "b"]
        assert find_default_converter(tuple[str, ...])("a,b") == ("a", "b")

    def test_class_by_name(self):
        """Test converting dotted names to classes."""
        assert find_default_converter(type)("collections.OrderedDict") is OrderedDict

    def test_locale_and_properties(self):
        """Test Locale and Properties converters."""
        assert find_default_converter(Locale)("fr_FR") == Locale("fr", "FR")
        assert find_default_converter(Properties)("a=1") == {"a": "1"}

    def test_property_values(self):
        """Test converting a block of lines to property values."""
        for declared in (MutablePropertyValues, IPropertyValues):
            pvs = find_default_converter(declared)("name=Rex\nage=3")
            assert isinstance(pvs, MutablePropertyValues)
            assert pvs.get_property_value("age").value == "3"

    def test_no_default(self):
        """Test that other types have no built-in converter."""
        assert find_default_converter(int) is None
        assert find_default_converter(list[int]) is None


class TestConverterRegistry:
    """Test cases for the fallback converter registry."""

    def test_registered_converter_wins(self):
        """Test that explicitly registered converters are used first."""
        registry = ConverterRegistry()
        registry.register(int, lambda text: 42)
        assert registry.find(int)("1") == 42

    def test_unregister(self):
        """Test that unregistering falls back to coercion."""
        registry = ConverterRegistry()
        registry.register(int, lambda text: 42)
        registry.unregister(int)
        assert registry.find(int)("7") == 7

    def test_enum_by_name_or_value(self):
        """Test converting enum members by name and by value."""
        converter = ConverterRegistry().find(Color)
        assert converter("RED") is Color.RED
        assert converter("green") is Color.GREEN
        with pytest.raises(ValueError, match="is not a member of Color"):
            converter("blue")

    def test_pydantic_coercion(self):
        """Test lax coercion of text to numbers and booleans."""
        registry = ConverterRegistry()
        assert registry.find(int)("12") == 12
        assert registry.find(float)("1.5") == 1.5
        assert registry.find(bool)("true") is True

    def test_coercion_failure_is_value_error(self):
        """Test that invalid text raises a ValueError subclass."""
        with pytest.raises(ValueError):
            ConverterRegistry().find(int)("twelve")

    def test_unsupported_type(self):
        """Test that arbitrary classes have no fallback converter."""

        class Opaque:
            pass

        assert ConverterRegistry().find(Opaque) is None
