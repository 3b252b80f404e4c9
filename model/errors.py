"""Exceptions raised by the program model and its algorithms."""


class NonInstantiableSignatureError(ValueError):
    """A component whose generic signature could not be resolved was used."""


class UnknownNodeError(TypeError):
    """An expression or statement of an unrecognized variant reached an algorithm."""

    def __init__(self, node: object, where: str) -> None:
        super().__init__(f"Unknown node class {type(node).__name__} in {where}()")
        self.node = node
        self.where = where


class ScopeError(ValueError):
    """A variable name was declared twice in one program."""
