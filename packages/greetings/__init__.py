from packages.greetings.categories import default_registry
from packages.greetings.content import ContentChoice, Leaf, MascotContentTable, StaticContentTable
from packages.greetings.context import GreetingContext, detect_context
from packages.greetings.errors import EmptyRegistryError, GreetingConfigError, RegistryConfigError
from packages.greetings.predicates import PredicateRegistry, builtin_predicates
from packages.greetings.registry import CategoryRegistry, load_registry, registry_from_dict
from packages.greetings.selector import GreetingSelector, SelectionResult, SelectionState
from packages.greetings.service import build_greeting_selector

__all__ = [
    "default_registry",
    "ContentChoice",
    "Leaf",
    "MascotContentTable",
    "StaticContentTable",
    "GreetingContext",
    "detect_context",
    "EmptyRegistryError",
    "GreetingConfigError",
    "RegistryConfigError",
    "PredicateRegistry",
    "builtin_predicates",
    "CategoryRegistry",
    "load_registry",
    "registry_from_dict",
    "GreetingSelector",
    "SelectionResult",
    "SelectionState",
    "build_greeting_selector",
]
