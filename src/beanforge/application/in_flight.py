"""Application layer - Cycle breaking through in-flight bean identities."""

from typing import Any, Dict, Optional


class InFlightBeans:
    """Instances created during one top-level bean lookup, by bean name.

    An instance is registered as soon as it exists, before its properties are
    bound. A reference to the same name later in the same lookup receives that
    identity instead of creating the bean again, so circular graphs resolve
    without recursing forever.

    One map is created per top-level ``get_bean`` call and passed down through
    every nested lookup; it is discarded when the call returns.

    Attributes:
        _instances: Partially constructed instances by canonical bean name.

    Example:
        >>> in_flight = InFlightBeans()
        >>> in_flight.register("kerry", kerry)
        >>> in_flight.get("kerry") is kerry
        True
    """

    def __init__(self) -> None:
        """Initialize an empty in-flight map."""
        self._instances: Dict[str, Any] = {}

    def register(self, bean_name: str, instance: Any) -> None:
        """Record a newly created instance under its bean name.

        Args:
            bean_name: Canonical name the instance is being created for.
            instance: The instance, possibly without any property set yet.
        """
        self._instances[bean_name] = instance

    def get(self, bean_name: str) -> Optional[Any]:
        """Return the in-flight instance for a name, or None."""
        return self._instances.get(bean_name)

    def items(self) -> Dict[str, Any]:
        """Return a copy of the instances by bean name."""
        return dict(self._instances)

    def __contains__(self, bean_name: object) -> bool:
        return bean_name in self._instances

    def __len__(self) -> int:
        return len(self._instances)
