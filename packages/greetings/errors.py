from __future__ import annotations


class GreetingConfigError(RuntimeError):
    pass


class EmptyRegistryError(GreetingConfigError):
    """Raised when a selection is requested against a registry with no categories."""


class RegistryConfigError(GreetingConfigError, ValueError):
    pass
