import importlib
from typing import Any, Callable, Iterator, List, Literal, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from beanforge.domain.enums import DefinitionKind
from beanforge.domain.exceptions import BeanDefinitionStoreError
from beanforge.domain.interfaces import IPropertyValues

DEFAULT_MAX_PARENT_DEPTH = 64


def resolve_class_name(class_name: str) -> Type:
    """Import a class from its dotted path.

    Accepts ``"package.module.Class"``, ``"package.module:Outer.Inner"`` and
    names of builtins such as ``"int"``.

    Raises:
        ValueError: If the module or attribute cannot be found, or is not a class.
    """
    text = class_name.strip()
    if ":" in text:
        module_name, qualname = text.split(":", 1)
    elif "." in text:
        module_name, qualname = text.rsplit(".", 1)
    else:
        module_name, qualname = "builtins", text
    try:
        target: Any = importlib.import_module(module_name)
        for part in qualname.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as e:
        raise ValueError(f"Invalid class name [{class_name}]: {e}") from e
    if not isinstance(target, type):
        raise ValueError(f"Invalid class name [{class_name}]: {target!r} is not a class")
    return target


class PropertyValue(BaseModel):
    """Value object holding one property binding.

    Attributes:
        name: Property name, possibly a dot-separated nested path.
        value: Raw value: a literal, a RuntimeBeanReference or a managed collection.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Name or nested path of the property.")
    value: Any = Field(default=None, description="Raw value to bind to the property.")


class RuntimeBeanReference(BaseModel):
    """Placeholder for another bean, resolved to the live instance while wiring.

    Attributes:
        bean_name: Name of the referenced bean.
    """

    model_config = ConfigDict(frozen=True)

    bean_name: str = Field(..., description="Name of the referenced bean.")


class ManagedList(list):
    """List whose elements may contain RuntimeBeanReferences to resolve while wiring."""


class ManagedMap(dict):
    """Dict whose values may contain RuntimeBeanReferences to resolve while wiring."""


class MutablePropertyValues(IPropertyValues):
    """Ordered, mutable collection of PropertyValue objects.

    Example:
        >>> pvs = MutablePropertyValues({"name": "Rex"})
        >>> pvs.add("owner", RuntimeBeanReference(bean_name="kerry"))
        >>> [pv.name for pv in pvs]
        ['name', 'owner']
    """

    def __init__(self, source: Union[IPropertyValues, Mapping[str, Any], None] = None) -> None:
        """Initialize empty, or copy another PropertyValues or a mapping.

        Args:
            source: PropertyValues to copy, or a mapping of property names to values.
        """
        self._property_values: List[PropertyValue] = []
        if source is None:
            return
        if isinstance(source, IPropertyValues):
            for pv in source.get_property_values():
                self.add_property_value(PropertyValue(name=pv.name, value=pv.value))
        else:
            for name, value in source.items():
                self.add_property_value(PropertyValue(name=name, value=value))

    def add_property_value(self, pv: PropertyValue) -> None:
        self._property_values.append(pv)

    def add(self, name: str, value: Any) -> "MutablePropertyValues":
        """Append a binding and return self, so calls can be chained."""
        self.add_property_value(PropertyValue(name=name, value=value))
        return self

    def get_property_values(self) -> List[PropertyValue]:
        return list(self._property_values)

    def get_property_value(self, property_name: str) -> Optional[PropertyValue]:
        for pv in self._property_values:
            if pv.name == property_name:
                return pv
        return None

    def contains(self, property_name: str) -> bool:
        return self.get_property_value(property_name) is not None

    def set_property_value_at(self, pv: PropertyValue, index: int) -> None:
        """Replace the binding at the given position."""
        self._property_values[index] = pv

    def changes_since(self, old: IPropertyValues) -> "MutablePropertyValues":
        """Return the bindings that are new or different compared to ``old``.

        Args:
            old: The previous set of property values.

        Returns:
            A new MutablePropertyValues with only the changed bindings.
        """
        changes = MutablePropertyValues()
        if old is self:
            return changes
        for pv in self._property_values:
            old_pv = old.get_property_value(pv.name)
            if old_pv is None or old_pv != pv:
                changes.add_property_value(pv)
        return changes

    def __iter__(self) -> Iterator[PropertyValue]:
        return iter(list(self._property_values))

    def __len__(self) -> int:
        return len(self._property_values)

    def __repr__(self) -> str:
        body = ", ".join(f"{pv.name}={pv.value!r}" for pv in self._property_values)
        return f"MutablePropertyValues(length={len(self)}; {body})"


DefinitionLookup = Callable[[str], Optional["AbstractBeanDefinition"]]


class AbstractBeanDefinition(BaseModel):
    """Common part of a bean recipe.

    Attributes:
        singleton: Whether the definition yields one shared instance. Immutable.
        property_values: Bindings applied to every new instance.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: DefinitionKind
    singleton: bool = Field(default=True, frozen=True, description="Singleton or prototype scope.")
    property_values: MutablePropertyValues = Field(
        default_factory=MutablePropertyValues,
        description="Property bindings applied to new instances.",
    )

    @field_validator("property_values", mode="before")
    @classmethod
    def coerce_property_values(cls, value: Any) -> Any:
        if value is None:
            return MutablePropertyValues()
        if isinstance(value, MutablePropertyValues):
            return value
        if isinstance(value, (IPropertyValues, Mapping)):
            return MutablePropertyValues(value)
        return value

    @property
    def is_singleton(self) -> bool:
        return self.singleton

    def get_definition_chain(
        self,
        lookup: DefinitionLookup,
        max_depth: int = DEFAULT_MAX_PARENT_DEPTH,
    ) -> List["AbstractBeanDefinition"]:
        """Return this definition followed by its ancestors, ending with the root.

        Every hop is checked, so a dangling or cyclic parent link fails instead of looping.

        Args:
            lookup: Returns the definition registered under a name, or None.
            max_depth: Maximum number of parent hops.

        Raises:
            BeanDefinitionStoreError: If a parent is missing, the chain cycles or is too deep.
        """
        chain: List[AbstractBeanDefinition] = [self]
        visited: List[str] = []
        definition: AbstractBeanDefinition = self
        while isinstance(definition, ChildBeanDefinition):
            parent_name = definition.parent_name
            if parent_name in visited:
                cycle = " -> ".join(visited + [parent_name])
                raise BeanDefinitionStoreError(f"BeanDefinition store corrupted: cyclic parent chain {cycle}")
            if len(visited) >= max_depth:
                raise BeanDefinitionStoreError(
                    f"BeanDefinition store corrupted: parent chain exceeds {max_depth} hops"
                )
            visited.append(parent_name)
            parent = lookup(parent_name)
            if parent is None:
                raise BeanDefinitionStoreError(
                    f"BeanDefinition store corrupted: cannot resolve parent '{parent_name}'"
                )
            chain.append(parent)
            definition = parent
        if not isinstance(definition, RootBeanDefinition):
            raise BeanDefinitionStoreError(f"Unknown definition type: {definition!r}")
        return chain

    def resolve_bean_class(
        self,
        lookup: DefinitionLookup,
        max_depth: int = DEFAULT_MAX_PARENT_DEPTH,
    ) -> Type:
        """Walk parent links up to the nearest root definition and return its class.

        Args:
            lookup: Returns the definition registered under a name, or None.
            max_depth: Maximum number of parent hops.

        Returns:
            The class owned by the root definition.

        Raises:
            BeanDefinitionStoreError: If a parent is missing, the chain cycles or is too deep.
        """
        root = self.get_definition_chain(lookup, max_depth)[-1]
        return root.bean_class

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AbstractBeanDefinition) or self.kind != other.kind:
            return False
        return (
            self.singleton == other.singleton
            and len(self.property_values.changes_since(other.property_values)) == 0
            and len(other.property_values.changes_since(self.property_values)) == 0
        )


class RootBeanDefinition(AbstractBeanDefinition):
    """Definition that owns the class to instantiate.

    Example:
        >>> definition = RootBeanDefinition(bean_class=Dog, property_values={"name": "Rex"})
        >>> definition.singleton
        True
    """

    kind: Literal[DefinitionKind.ROOT] = DefinitionKind.ROOT
    bean_class: Type[Any] = Field(..., description="Class instantiated for this bean.")

    @field_validator("bean_class", mode="before")
    @classmethod
    def import_class_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return resolve_class_name(value)
        return value

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, RootBeanDefinition)
            and super().__eq__(other)
            and self.bean_class is other.bean_class
        )


class ChildBeanDefinition(AbstractBeanDefinition):
    """Definition that inherits class and bindings from a named parent definition.

    The child's bindings are applied after the parent's, so they override them.
    """

    kind: Literal[DefinitionKind.CHILD] = DefinitionKind.CHILD
    parent_name: str = Field(..., description="Name of the parent definition.")

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, ChildBeanDefinition)
            and super().__eq__(other)
            and self.parent_name == other.parent_name
        )


class PropertyChangeEvent(BaseModel):
    """Describes one property change, before or after it is applied.

    Attributes:
        source: The object whose property changes.
        property_name: Name of the property.
        old_value: Value before the change, None if unknown.
        new_value: Value after conversion.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    source: Any = Field(..., description="Object whose property changes.")
    property_name: str = Field(..., description="Name of the changed property.")
    old_value: Any = Field(default=None, description="Previous value, if readable.")
    new_value: Any = Field(default=None, description="New value after conversion.")


class PropertyDescriptor(BaseModel):
    """Introspected description of one property of a class.

    Attributes:
        name: Property name.
        property_type: Declared type (``typing.Any`` when undeclared).
        readable: Whether the property can be read.
        writable: Whether the property can be written.
        accessor: The ``property`` object, None for plain attributes.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    property_type: Any = Field(default=Any)
    readable: bool = True
    writable: bool = True
    accessor: Optional[property] = None
