"""Application layer - Property change notification."""

import logging
from typing import Any, Dict, List, Optional

from beanforge.domain import PropertyChangeEvent, PropertyChangeListener, PropertyVetoError

logger = logging.getLogger(__name__)


class PropertyChangeSupport:
    """Dispatches property change events to listeners.

    Listeners are registered either for every property or for one named property.

    Attributes:
        source: The object whose properties are observed.
        _listeners: Listeners notified for every property.
        _named_listeners: Listeners notified for one property, by property name.
    """

    def __init__(self, source: Any) -> None:
        self.source = source
        self._listeners: List[PropertyChangeListener] = []
        self._named_listeners: Dict[str, List[PropertyChangeListener]] = {}

    def add_listener(self, listener: PropertyChangeListener, property_name: Optional[str] = None) -> None:
        if property_name is None:
            self._listeners.append(listener)
        else:
            self._named_listeners.setdefault(property_name, []).append(listener)

    def remove_listener(self, listener: PropertyChangeListener, property_name: Optional[str] = None) -> None:
        listeners = self._listeners if property_name is None else self._named_listeners.get(property_name, [])
        if listener in listeners:
            listeners.remove(listener)

    def get_listeners(self, property_name: Optional[str] = None) -> List[PropertyChangeListener]:
        """Return the listeners notified for a property, or the global ones if no name is given."""
        if property_name is None:
            return list(self._listeners)
        return list(self._listeners) + list(self._named_listeners.get(property_name, []))

    def has_listeners(self, property_name: Optional[str] = None) -> bool:
        return bool(self.get_listeners(property_name))

    def fire(self, event: PropertyChangeEvent) -> None:
        """Notify listeners, unless old and new values are known and equal."""
        if event.old_value is not None and event.old_value == event.new_value:
            return
        for listener in self.get_listeners(event.property_name):
            listener(event)


class VetoableChangeSupport(PropertyChangeSupport):
    """Dispatches proposed changes to listeners that may veto them.

    A listener vetoes by raising PropertyVetoError. Listeners already notified
    then receive a revert event before the veto propagates.
    """

    def fire(self, event: PropertyChangeEvent) -> None:
        if event.old_value is not None and event.old_value == event.new_value:
            return
        notified: List[PropertyChangeListener] = []
        for listener in self.get_listeners(event.property_name):
            try:
                listener(event)
            except PropertyVetoError as e:
                if e.event is None:
                    e.event = event
                self._revert(event, notified)
                raise
            notified.append(listener)

    def _revert(self, event: PropertyChangeEvent, notified: List[PropertyChangeListener]) -> None:
        revert_event = event.model_copy(update={"old_value": event.new_value, "new_value": event.old_value})
        for listener in notified:
            try:
                listener(revert_event)
            except PropertyVetoError:
                logger.debug("Ignoring veto of revert event for property '%s'", event.property_name)
