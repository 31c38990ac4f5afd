from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from beanforge.domain import BeanNotOfRequiredTypeError, IListableBeanFactory, NoSuchBeanDefinitionError

T = TypeVar("T")


class StaticListableBeanFactory(IListableBeanFactory):
    """Listable bean factory over pre-built objects.

    Holds ready instances instead of definitions: nothing is created or wired,
    every bean is a singleton and no aliases exist. Useful as a test double
    wherever a bean factory is expected, and as the parent of a
    ListableBeanFactory to expose existing objects by name.

    Attributes:
        _beans: Instances by bean name, in insertion order.

    Example:
        >>> parent = StaticListableBeanFactory()
        >>> parent.add_bean("clock", FakeClock())
        >>>
        >>> factory = ListableBeanFactory(parent_bean_factory=parent)
        >>> factory.register_bean_definition(
        ...     "scheduler",
        ...     RootBeanDefinition(
        ...         bean_class=Scheduler,
        ...         property_values={"clock": RuntimeBeanReference(bean_name="clock")},
        ...     ),
        ... )
        >>> factory.get_bean("scheduler").clock is parent.get_bean("clock")
        True
    """

    __test__ = False  # Tell pytest not to collect this class as a test

    def __init__(self, beans: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the factory.

        Args:
            beans: Optional initial instances by bean name.
        """
        self._beans: Dict[str, Any] = dict(beans or {})

    def add_bean(self, name: str, bean: Any) -> None:
        """Register an instance under a name, replacing any previous one."""
        self._beans[name] = bean

    def get_bean(self, name: str, required_type: Optional[Type[T]] = None) -> Any:
        if name not in self._beans:
            raise NoSuchBeanDefinitionError(name)
        bean = self._beans[name]
        if required_type is not None and not isinstance(bean, required_type):
            raise BeanNotOfRequiredTypeError(name, required_type, bean)
        return bean

    def is_singleton(self, name: str) -> bool:
        if name not in self._beans:
            raise NoSuchBeanDefinitionError(name)
        return True

    def get_aliases(self, name: str) -> List[str]:
        return []

    def get_bean_definition_count(self) -> int:
        return len(self._beans)

    def get_bean_definition_names(self, bean_type: Optional[Type] = None) -> List[str]:
        if bean_type is None:
            return list(self._beans)
        return [name for name, bean in self._beans.items() if isinstance(bean, bean_type)]


def create_static_bean_factory(*beans: Tuple[str, Any]) -> StaticListableBeanFactory:
    """Create a static factory holding the given instances.

    Args:
        *beans: Tuples of (bean_name, instance).

    Returns:
        StaticListableBeanFactory exposing the instances by name.

    Example:
        >>> factory = create_static_bean_factory(
        ...     ("clock", FakeClock()),
        ...     ("mailer", FakeMailer()),
        ... )
        >>> factory.get_bean_definition_count()
        2
    """
    factory = StaticListableBeanFactory()

    for name, bean in beans:
        factory.add_bean(name, bean)

    return factory
