from enum import Enum


class DefinitionKind(str, Enum):
    """Tags the two variants of a bean definition.

    Attributes:
        ROOT: Definition that owns the class to instantiate.
        CHILD: Definition that inherits class and properties from a parent definition.
    """

    ROOT = "root"
    CHILD = "child"

    def __str__(self) -> str:
        return self.value
