"""Application layer - Object graph construction from bean definitions."""

import logging
from abc import abstractmethod
from typing import Any, Dict, List, Optional, Type, TypeVar

from beanforge.application.bean_wrapper import BeanWrapper
from beanforge.application.in_flight import InFlightBeans
from beanforge.application.introspection import instantiate_class
from beanforge.application.singleton_cache import SingletonCache
from beanforge.application.value_resolver import PropertyValueResolver
from beanforge.config import BeanFactorySettings, get_settings
from beanforge.domain import (
    AbstractBeanDefinition,
    BeanCreationError,
    BeanFactoryAware,
    BeanIsNotAFactoryError,
    BeanNotOfRequiredTypeError,
    BeansError,
    FactoryBean,
    FatalBeanError,
    IBeanFactory,
    InitializingBean,
    IPropertyValues,
    NoSuchBeanDefinitionError,
    PropertyAccessErrors,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AbstractBeanFactory(IBeanFactory):
    """Creates, wires and caches beans from definitions supplied by a subclass.

    Subclasses only implement ``get_bean_definition``. This class resolves
    definition inheritance, breaks reference cycles through an in-flight map,
    binds properties, runs post-construction hooks, caches singletons and
    unwraps factory beans.

    Attributes:
        _parent_bean_factory: Factory consulted for names this factory does not define.
        _settings: Dereference marker, nesting separator and parent depth limit.
        _aliases: Alias to canonical bean name (one hop).
        _singleton_cache: Shared instances of singleton beans.
        _value_resolver: Resolves bean references and managed collections.
    """

    def __init__(
        self,
        parent_bean_factory: Optional[IBeanFactory] = None,
        settings: Optional[BeanFactorySettings] = None,
    ) -> None:
        """Initialize the factory.

        Args:
            parent_bean_factory: Optional factory to delegate unknown names to.
            settings: Factory settings; defaults to the shared settings.
        """
        self._parent_bean_factory = parent_bean_factory
        self._settings = settings or get_settings()
        self._aliases: Dict[str, str] = {}
        self._singleton_cache = SingletonCache()
        self._value_resolver = PropertyValueResolver(self._get_bean_internal)

    @property
    def parent_bean_factory(self) -> Optional[IBeanFactory]:
        return self._parent_bean_factory

    @property
    def settings(self) -> BeanFactorySettings:
        return self._settings

    # ------------------------------------------------------------------
    # Names and aliases
    # ------------------------------------------------------------------

    def _is_factory_dereference(self, name: str) -> bool:
        return name.startswith(self._settings.factory_bean_prefix)

    def _transformed_bean_name(self, name: str) -> str:
        """Strip the dereference marker and map an alias to its canonical name."""
        if self._is_factory_dereference(name):
            name = name[len(self._settings.factory_bean_prefix) :]
        return self._aliases.get(name, name)

    def register_alias(self, name: str, alias: str) -> None:
        """Make an alias behave exactly like a bean name.

        Aliases resolve in one hop: an alias of an alias is not followed.

        Args:
            name: Canonical bean name.
            alias: Additional name for the same bean.
        """
        logger.debug("Creating alias '%s' for bean with name '%s'", alias, name)
        self._aliases[alias] = name

    def get_aliases(self, name: str) -> List[str]:
        return [alias for alias, canonical in self._aliases.items() if canonical == name]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_bean(self, name: str, required_type: Optional[Type[T]] = None) -> Any:
        """Return the bean registered under a name or alias.

        A name prefixed with the dereference marker (``&`` by default) returns
        a factory bean itself instead of its product.

        Args:
            name: Bean name or alias.
            required_type: Type the bean must be an instance of.

        Returns:
            The bean, or the product of a factory bean.

        Raises:
            NoSuchBeanDefinitionError: If neither this factory nor its parent defines the name.
            BeanNotOfRequiredTypeError: If the bean is not an instance of required_type.
            BeanIsNotAFactoryError: If the dereference marker is used on a plain bean.
            BeanDefinitionStoreError: If the definitions are inconsistent.
            BeanCreationError: If the bean cannot be created or initialized.

        Example:
            >>> factory.register_bean_definition("rex", RootBeanDefinition(bean_class=Dog))
            >>> factory.get_bean("rex", Dog) is factory.get_bean("rex")
            True
        """
        bean = self._get_bean_internal(name, InFlightBeans())
        if required_type is not None and not isinstance(bean, required_type):
            raise BeanNotOfRequiredTypeError(name, required_type, bean)
        return bean

    def _get_bean_internal(self, name: str, in_flight: InFlightBeans) -> Any:
        if name is None:
            raise NoSuchBeanDefinitionError(None, "cannot get bean with None name")
        bean_name = self._transformed_bean_name(name)

        if bean_name in in_flight:
            logger.debug("Returning in-flight instance of bean '%s' to break reference cycle", bean_name)
            return self._get_object_for_bean_instance(name, bean_name, in_flight.get(bean_name))

        try:
            definition = self.get_bean_definition(bean_name)
        except NoSuchBeanDefinitionError:
            if self._parent_bean_factory is None:
                raise
            logger.debug("Bean '%s' not defined here, delegating to parent factory", name)
            return self._parent_bean_factory.get_bean(name)

        if definition.is_singleton:
            instance = self._singleton_cache.get_or_create(
                bean_name, lambda: self._create_bean(bean_name, definition, in_flight)
            )
        else:
            instance = self._create_bean(bean_name, definition, in_flight)
        return self._get_object_for_bean_instance(name, bean_name, instance)

    def _get_object_for_bean_instance(self, name: str, bean_name: str, instance: Any) -> Any:
        """Return the instance itself, or the product when it is a factory bean."""
        is_factory = isinstance(instance, FactoryBean)
        if self._is_factory_dereference(name):
            if not is_factory:
                raise BeanIsNotAFactoryError(bean_name, instance)
            logger.debug("Calling code asked for the factory bean itself for name '%s'", bean_name)
            return instance
        if not is_factory:
            return instance

        logger.debug("Bean with name '%s' is a factory bean", bean_name)
        try:
            product = instance.get_object()
        except BeansError:
            raise
        except Exception as e:
            raise BeanCreationError(bean_name, f"factory bean threw exception on object creation: {e}") from e

        pass_through = instance.get_property_values()
        if pass_through is not None and product is not None:
            logger.debug("Applying pass-through properties to product of factory bean '%s'", bean_name)
            BeanWrapper(product, settings=self._settings).set_property_values(pass_through)
        return product

    def is_singleton(self, name: str) -> bool:
        """Return whether the name denotes a shared instance.

        Raises:
            NoSuchBeanDefinitionError: If neither this factory nor its parent defines the name.
        """
        bean_name = self._transformed_bean_name(name)
        try:
            return self.get_bean_definition(bean_name).is_singleton
        except NoSuchBeanDefinitionError:
            if self._parent_bean_factory is None:
                raise
            return self._parent_bean_factory.is_singleton(name)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _lookup_definition(self, bean_name: str) -> Optional[AbstractBeanDefinition]:
        try:
            return self.get_bean_definition(bean_name)
        except NoSuchBeanDefinitionError:
            return None

    def _create_bean(self, bean_name: str, definition: AbstractBeanDefinition, in_flight: InFlightBeans) -> Any:
        """Instantiate, wire and initialize a new bean.

        The new instance is registered in the in-flight map before any property
        is bound, so references back to ``bean_name`` receive this identity.
        Bindings are applied from the root definition down to ``definition``,
        so child bindings override inherited ones.

        On failure, singletons cached during the current lookup are evicted, since
        they may hold the failed instance. A later lookup builds them again.
        """
        chain = definition.get_definition_chain(self._lookup_definition, self._settings.max_parent_depth)
        bean_class = chain[-1].bean_class
        logger.debug("Creating instance of bean '%s' with class %s", bean_name, bean_class.__name__)
        try:
            instance = instantiate_class(bean_class)
        except FatalBeanError as e:
            raise BeanCreationError(bean_name, str(e)) from e
        in_flight.register(bean_name, instance)

        try:
            wrapper = BeanWrapper(instance, event_propagation_enabled=False, settings=self._settings)
            for level in reversed(chain):
                self._apply_property_values(bean_name, wrapper, level.property_values, in_flight)
            self._call_lifecycle_methods_if_necessary(bean_name, instance)
        except BeansError:
            logger.debug("Creation of bean '%s' failed, evicting singletons created for it", bean_name)
            self._singleton_cache.evict(in_flight.items())
            raise
        return instance

    def _apply_property_values(
        self,
        bean_name: str,
        wrapper: BeanWrapper,
        property_values: IPropertyValues,
        in_flight: InFlightBeans,
    ) -> None:
        if len(property_values.get_property_values()) == 0:
            return
        resolved = self._value_resolver.resolve_property_values(bean_name, wrapper, property_values, in_flight)
        try:
            wrapper.set_property_values(resolved)
        except PropertyAccessErrors:
            raise
        except FatalBeanError as e:
            raise BeanCreationError(bean_name, f"error setting property values: {e}") from e

    def _call_lifecycle_methods_if_necessary(self, bean_name: str, instance: Any) -> None:
        if isinstance(instance, InitializingBean):
            logger.debug("Calling after_properties_set() on bean with name '%s'", bean_name)
            try:
                instance.after_properties_set()
            except Exception as e:
                raise BeanCreationError(bean_name, f"after_properties_set() threw an exception: {e}") from e

        if isinstance(instance, BeanFactoryAware):
            logger.debug("Calling set_bean_factory() on bean with name '%s'", bean_name)
            try:
                instance.set_bean_factory(self)
            except Exception as e:
                raise BeanCreationError(bean_name, f"set_bean_factory() threw an exception: {e}") from e

    # ------------------------------------------------------------------
    # Subclass contract
    # ------------------------------------------------------------------

    @abstractmethod
    def get_bean_definition(self, bean_name: str) -> AbstractBeanDefinition:
        """Return the definition registered under a canonical name.

        Raises:
            NoSuchBeanDefinitionError: If no definition is registered under the name.
        """
