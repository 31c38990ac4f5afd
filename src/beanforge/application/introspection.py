"""Application layer - Class introspection and type checks for property binding."""

import logging
import threading
import types
from typing import Any, ClassVar, Dict, Literal, Optional, Tuple, Type, Union, get_args, get_origin, get_type_hints

from beanforge.domain import FatalBeanError, PropertyDescriptor

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES: Tuple[Type, ...] = (int, float, bool, complex)

_NONE_TYPE = type(None)
_UNION_TYPES = (Union, types.UnionType)

_cache: Dict[Type, Dict[str, PropertyDescriptor]] = {}
_cache_lock = threading.Lock()


def instantiate_class(cls: Type) -> Any:
    """Create an instance of a class through its no-argument constructor.

    Raises:
        FatalBeanError: If the class cannot be instantiated.
    """
    try:
        return cls()
    except Exception as e:
        raise FatalBeanError(f"Could not instantiate class {cls.__name__}: {e}") from e


def unwrap_optional(required_type: Any) -> Any:
    """Return ``X`` for ``Optional[X]``, otherwise the type unchanged."""
    if get_origin(required_type) in _UNION_TYPES:
        args = [arg for arg in get_args(required_type) if arg is not _NONE_TYPE]
        if len(args) == 1:
            return args[0]
    return required_type


def is_primitive(required_type: Any) -> bool:
    """Primitive properties are non-optional ``int``, ``float``, ``bool`` and ``complex``."""
    return required_type in PRIMITIVE_TYPES


def is_assignable(value: Any, required_type: Any) -> bool:
    """Check whether a value can be stored in a property of the given declared type.

    Generic parameters are not checked, only their origin (``list[int]`` accepts any list).
    """
    if value is None or required_type is Any or required_type is None:
        return True
    origin = get_origin(required_type)
    if origin in _UNION_TYPES:
        return any(is_assignable(value, arg) for arg in get_args(required_type))
    if origin is not None:
        if origin is Literal:
            return value in get_args(required_type)
        if origin is ClassVar:
            return True
        required_type = origin
    if not isinstance(required_type, type):
        return True
    if required_type is float and isinstance(value, int) and not isinstance(value, bool):
        return True
    try:
        return isinstance(value, required_type)
    except TypeError:
        return True


def is_subtype(candidate: Any, declared_type: Any) -> bool:
    """Check whether a converter registered for ``candidate`` fits a property of ``declared_type``."""
    declared = unwrap_optional(declared_type)
    candidate = unwrap_optional(candidate)
    if declared is Any or candidate == declared:
        return True
    declared = get_origin(declared) or declared
    candidate = get_origin(candidate) or candidate
    if isinstance(declared, type) and isinstance(candidate, type):
        return issubclass(candidate, declared)
    return False


def sequence_element_type(required_type: Any) -> Optional[Tuple[Type, Any]]:
    """Return ``(container, element type)`` for ``tuple[X, ...]`` and ``list[X]`` declarations."""
    required_type = unwrap_optional(required_type)
    origin = get_origin(required_type)
    args = get_args(required_type)
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return tuple, args[0]
    if origin is list and len(args) == 1:
        return list, args[0]
    return None


def _class_type_hints(cls: Type) -> Dict[str, Any]:
    try:
        return get_type_hints(cls)
    except Exception:
        # Unresolvable forward references: fall back to the raw annotations.
        hints: Dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            for name, annotation in getattr(klass, "__annotations__", {}).items():
                hints[name] = Any if isinstance(annotation, str) else annotation
        return hints


def _accessor_type(accessor: property) -> Any:
    for function, key in ((accessor.fset, None), (accessor.fget, "return")):
        if function is None:
            continue
        try:
            hints = get_type_hints(function)
        except Exception:
            continue
        if key == "return":
            if "return" in hints:
                return hints["return"]
            continue
        hints.pop("return", None)
        if hints:
            return next(iter(hints.values()))
    return Any


def _is_framework_class(klass: Type) -> bool:
    # Members of object and of pydantic's BaseModel are not bean properties.
    return klass is object or klass.__module__.split(".")[0] in ("pydantic", "pydantic_core")


def _introspect(cls: Type) -> Dict[str, PropertyDescriptor]:
    descriptors: Dict[str, PropertyDescriptor] = {}
    class_vars = set()

    for name, hint in _class_type_hints(cls).items():
        if hint is ClassVar or get_origin(hint) is ClassVar:
            class_vars.add(name)
            continue
        if name.startswith("_"):
            continue
        descriptors[name] = PropertyDescriptor(name=name, property_type=hint)

    for klass in reversed(cls.__mro__):
        if _is_framework_class(klass):
            continue
        for name, attribute in vars(klass).items():
            if name.startswith("_"):
                continue
            if isinstance(attribute, property):
                descriptors[name] = PropertyDescriptor(
                    name=name,
                    property_type=_accessor_type(attribute),
                    readable=attribute.fget is not None,
                    writable=attribute.fset is not None,
                    accessor=attribute,
                )
            elif name in descriptors or name in class_vars:
                continue
            elif not callable(attribute) and not hasattr(attribute, "__get__"):
                descriptors[name] = PropertyDescriptor(name=name)
    return descriptors


def get_property_descriptors(cls: Type) -> Dict[str, PropertyDescriptor]:
    """Return the bean properties of a class, introspected once and cached.

    Properties are ``property`` objects, public annotated attributes and public
    plain class attributes.

    Args:
        cls: The class to introspect.

    Returns:
        Mapping of property name to descriptor.
    """
    descriptors = _cache.get(cls)
    if descriptors is None:
        with _cache_lock:
            descriptors = _cache.get(cls)
            if descriptors is None:
                logger.debug("Introspecting properties of class %s", cls.__name__)
                descriptors = _introspect(cls)
                _cache[cls] = descriptors
    return descriptors


def clear_introspection_cache() -> None:
    """Forget every cached class description."""
    with _cache_lock:
        _cache.clear()
