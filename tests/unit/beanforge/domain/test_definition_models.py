"""Unit tests for domain models."""

from collections import OrderedDict
from typing import Any, List

import pytest
from pydantic import ValidationError

from beanforge.domain.enums import DefinitionKind
from beanforge.domain.exceptions import BeanDefinitionStoreError
from beanforge.domain.models import (
    ChildBeanDefinition,
    ManagedList,
    ManagedMap,
    MutablePropertyValues,
    PropertyDescriptor,
    PropertyValue,
    RootBeanDefinition,
    RuntimeBeanReference,
    resolve_class_name,
)


class Animal:
    pass


class Dog(Animal):
    pass


class TestResolveClassName:
    """Test cases for importing classes by name."""

    def test_dotted_path(self):
        """Test importing a class from module.Class."""
        assert resolve_class_name("collections.OrderedDict") is OrderedDict

    def test_colon_path(self):
        """Test importing a class from module:Class."""
        assert resolve_class_name("collections:OrderedDict") is OrderedDict

    def test_builtin_name(self):
        """Test that bare names are looked up in builtins."""
        assert resolve_class_name("int") is int

    def test_unknown_module(self):
        """Test that an unknown module raises ValueError."""
        with pytest.raises(ValueError, match="Invalid class name"):
            resolve_class_name("no_such_module_xyz.Thing")

    def test_not_a_class(self):
        """Test that a non-class attribute raises ValueError."""
        with pytest.raises(ValueError, match="is not a class"):
            resolve_class_name("os.path")


class TestPropertyValue:
    """Test cases for PropertyValue and RuntimeBeanReference."""

    def test_property_value_is_immutable(self):
        """Test that PropertyValue cannot be modified."""
        pv = PropertyValue(name="age", value=3)
        with pytest.raises(ValidationError):
            pv.value = 4

    def test_property_values_compare_by_content(self):
        """Test equality of PropertyValue objects."""
        assert PropertyValue(name="age", value=3) == PropertyValue(name="age", value=3)
        assert PropertyValue(name="age", value=3) != PropertyValue(name="age", value=4)

    def test_runtime_bean_reference(self):
        """Test that references compare by bean name."""
        assert RuntimeBeanReference(bean_name="rex") == RuntimeBeanReference(bean_name="rex")
        assert RuntimeBeanReference(bean_name="rex").bean_name == "rex"

    def test_managed_collections_are_plain_collections(self):
        """Test that managed collections behave like list and dict."""
        managed_list = ManagedList([1, RuntimeBeanReference(bean_name="rex")])
        managed_map = ManagedMap({"dog": RuntimeBeanReference(bean_name="rex")})
        assert isinstance(managed_list, list)
        assert isinstance(managed_map, dict)
        assert len(managed_list) == 2


class TestMutablePropertyValues:
    """Test cases for MutablePropertyValues."""

    def test_empty(self):
        """Test creating an empty collection."""
        pvs = MutablePropertyValues()
        assert len(pvs) == 0
        assert pvs.get_property_values() == []

    def test_from_mapping_keeps_order(self):
        """Test that mapping order is preserved."""
        pvs = MutablePropertyValues({"name": "Rex", "age": 3})
        assert [pv.name for pv in pvs] == ["name", "age"]
        assert pvs.get_property_value("age").value == 3

    def test_copy_of_other_property_values(self):
        """Test that copying creates an independent collection."""
        original = MutablePropertyValues({"name": "Rex"})
        copy = MutablePropertyValues(original)
        copy.add("age", 3)

        assert len(original) == 1
        assert len(copy) == 2

    def test_add_is_chainable(self):
        """Test that add returns the collection."""
        pvs = MutablePropertyValues().add("name", "Rex").add("age", 3)
        assert pvs.contains("name")
        assert pvs.contains("age")
        assert not pvs.contains("owner")

    def test_set_property_value_at(self):
        """Test replacing a binding by position."""
        pvs = MutablePropertyValues({"name": "Rex"})
        pvs.set_property_value_at(PropertyValue(name="name", value="Fido"), 0)
        assert pvs.get_property_value("name").value == "Fido"

    def test_get_missing_property_value(self):
        """Test that a missing binding returns None."""
        assert MutablePropertyValues().get_property_value("name") is None

    def test_changes_since(self):
        """Test that only new or different bindings are reported."""
        old = MutablePropertyValues({"name": "Rex", "age": 3})
        new = MutablePropertyValues({"name": "Rex", "age": 4, "color": "brown"})

        changes = new.changes_since(old)

        assert [pv.name for pv in changes] == ["age", "color"]
        assert len(old.changes_since(old)) == 0

    def test_repr(self):
        """Test the string representation."""
        assert repr(MutablePropertyValues({"name": "Rex"})) == "MutablePropertyValues(length=1; name='Rex')"


class TestRootBeanDefinition:
    """Test cases for RootBeanDefinition."""

    def test_defaults(self):
        """Test default scope and bindings."""
        definition = RootBeanDefinition(bean_class=Dog)
        assert definition.kind == DefinitionKind.ROOT
        assert definition.singleton is True
        assert definition.is_singleton is True
        assert isinstance(definition.property_values, MutablePropertyValues)
        assert len(definition.property_values) == 0

    def test_mapping_is_coerced_to_property_values(self):
        """Test that a plain mapping is accepted for property_values."""
        definition = RootBeanDefinition(bean_class=Dog, property_values={"name": "Rex"})
        assert isinstance(definition.property_values, MutablePropertyValues)
        assert definition.property_values.get_property_value("name").value == "Rex"

    def test_class_by_name(self):
        """Test that the class may be given as a dotted path."""
        definition = RootBeanDefinition(bean_class="collections.OrderedDict")
        assert definition.bean_class is OrderedDict

    def test_invalid_class_name(self):
        """Test that an unknown class name fails validation."""
        with pytest.raises(ValidationError):
            RootBeanDefinition(bean_class="collections.NoSuchThing")

    def test_singleton_flag_is_frozen(self):
        """Test that scope cannot change after construction."""
        definition = RootBeanDefinition(bean_class=Dog, singleton=False)
        with pytest.raises(ValidationError):
            definition.singleton = True

    def test_property_values_stay_mutable(self):
        """Test that bindings can be added after construction."""
        definition = RootBeanDefinition(bean_class=Dog)
        definition.property_values.add("name", "Rex")
        assert len(definition.property_values) == 1

    def test_resolve_bean_class_of_root(self):
        """Test that a root definition resolves to its own class."""
        definition = RootBeanDefinition(bean_class=Dog)
        assert definition.resolve_bean_class(lambda name: None) is Dog


class TestChildBeanDefinition:
    """Test cases for ChildBeanDefinition and parent chains."""

    def test_kind(self):
        """Test that child definitions are tagged CHILD."""
        assert ChildBeanDefinition(parent_name="dog").kind == DefinitionKind.CHILD

    @pytest.mark.parametrize("depth", [1, 2, 5, 20])
    def test_resolves_root_class_for_any_depth(self, depth):
        """Test that a chain of N children resolves to the root class."""
        definitions = {"level0": RootBeanDefinition(bean_class=Dog)}
        for level in range(1, depth + 1):
            definitions[f"level{level}"] = ChildBeanDefinition(parent_name=f"level{level - 1}")

        definition = definitions[f"level{depth}"]

        assert definition.resolve_bean_class(definitions.get) is Dog
        assert len(definition.get_definition_chain(definitions.get)) == depth + 1

    def test_chain_order_is_child_to_root(self):
        """Test that the chain starts with the definition and ends with the root."""
        root = RootBeanDefinition(bean_class=Dog)
        child = ChildBeanDefinition(parent_name="dog")
        chain = child.get_definition_chain({"dog": root}.get)
        assert chain[0] is child
        assert chain[-1] is root

    def test_missing_parent(self):
        """Test that a dangling parent link is store corruption."""
        child = ChildBeanDefinition(parent_name="ghost")
        with pytest.raises(BeanDefinitionStoreError, match="cannot resolve parent 'ghost'"):
            child.resolve_bean_class(lambda name: None)

    def test_cyclic_parent_chain(self):
        """Test that a cyclic parent chain is detected instead of looping."""
        definitions = {
            "a": ChildBeanDefinition(parent_name="b"),
            "b": ChildBeanDefinition(parent_name="a"),
        }
        with pytest.raises(BeanDefinitionStoreError, match="cyclic parent chain"):
            definitions["a"].resolve_bean_class(definitions.get)

    def test_chain_too_deep(self):
        """Test that max_depth bounds the number of parent hops."""
        definitions = {
            "root": RootBeanDefinition(bean_class=Dog),
            "one": ChildBeanDefinition(parent_name="root"),
            "two": ChildBeanDefinition(parent_name="one"),
            "three": ChildBeanDefinition(parent_name="two"),
        }
        assert definitions["two"].resolve_bean_class(definitions.get, max_depth=2) is Dog
        with pytest.raises(BeanDefinitionStoreError, match="exceeds 2 hops"):
            definitions["three"].resolve_bean_class(definitions.get, max_depth=2)


class TestDefinitionEquality:
    """Test cases for definition equality."""

    def test_equal_definitions(self):
        """Test that definitions with the same content are equal."""
        first = RootBeanDefinition(bean_class=Dog, property_values={"name": "Rex"})
        second = RootBeanDefinition(bean_class=Dog, property_values={"name": "Rex"})
        assert first == second

    def test_singleton_flag_must_match(self):
        """Test that differing scopes make definitions unequal."""
        first = RootBeanDefinition(bean_class=Dog, singleton=True)
        second = RootBeanDefinition(bean_class=Dog, singleton=False)
        assert first != second

    def test_property_differences_in_either_direction(self):
        """Test that an extra binding on either side makes definitions unequal."""
        smaller = RootBeanDefinition(bean_class=Dog, property_values={"name": "Rex"})
        larger = RootBeanDefinition(bean_class=Dog, property_values={"name": "Rex", "age": 3})
        assert smaller != larger
        assert larger != smaller

    def test_class_must_match(self):
        """Test that root definitions compare their classes."""
        assert RootBeanDefinition(bean_class=Dog) != RootBeanDefinition(bean_class=Animal)

    def test_parent_name_must_match(self):
        """Test that child definitions compare their parent names."""
        assert ChildBeanDefinition(parent_name="a") == ChildBeanDefinition(parent_name="a")
        assert ChildBeanDefinition(parent_name="a") != ChildBeanDefinition(parent_name="b")

    def test_root_never_equals_child(self):
        """Test that different definition kinds are unequal."""
        assert RootBeanDefinition(bean_class=Dog) != ChildBeanDefinition(parent_name="dog")


class TestPropertyDescriptor:
    """Test cases for PropertyDescriptor."""

    def test_defaults(self):
        """Test that an undeclared property has type Any and is readable and writable."""
        descriptor = PropertyDescriptor(name="age")
        assert descriptor.property_type is Any
        assert descriptor.readable and descriptor.writable
        assert descriptor.accessor is None

    def test_declared_type_is_kept(self):
        """Test that generic declared types are stored unchanged."""
        descriptor = PropertyDescriptor(name="ids", property_type=List[int], writable=False)
        assert descriptor.property_type == List[int]
        with pytest.raises(ValidationError):
            descriptor.writable = True
