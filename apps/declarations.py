"""Normalized filter declarations shared by apps and their host."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, NamedTuple

from core.exceptions import ConfigurationError

# Attribute set on methods marked with @filter_handler
FILTER_ATTR = "__ghost_filters__"


class FilterRegistration(NamedTuple):
    """Arguments forwarded positionally to ``filters.register``/``filters.unregister``."""
    name: str
    priority: Any
    handler: Callable[..., Any]


@dataclass(frozen=True)
class FilterDeclaration:
    """
    A single filter declaration, either with an explicit priority or with the
    host's default one (``priority is None``).

    Accepted shorthand forms:
      - ``"handleX"``          -> FilterDeclaration("handleX")
      - ``["handleX"]``        -> FilterDeclaration("handleX")
      - ``[9, "handleX"]``     -> FilterDeclaration("handleX", priority=9)
    """
    method_name: str
    priority: Any = None

    @classmethod
    def parse(cls, hook_name: str, declaration: object) -> FilterDeclaration:
        if isinstance(declaration, cls):
            return declaration

        if isinstance(declaration, str):
            return cls(declaration)

        if isinstance(declaration, (list, tuple)):
            if not declaration:
                raise ConfigurationError(
                    f"Filter '{hook_name}' has an empty declaration",
                    hook_name=hook_name,
                )
            if len(declaration) == 1:
                priority, method_name = None, declaration[0]
            else:
                # Anything past the method name is ignored
                priority, method_name = declaration[0], declaration[1]

            if not isinstance(method_name, str):
                raise ConfigurationError(
                    f"Filter '{hook_name}' method name must be a string, got {method_name!r}",
                    hook_name=hook_name,
                    method_name=method_name,
                )
            return cls(method_name, priority)

        raise ConfigurationError(
            f"Filter '{hook_name}' has an unsupported declaration {declaration!r}",
            hook_name=hook_name,
        )


def filter_handler(name: str, priority: Any = None):
    """
    Mark an App method as the handler of the ``name`` filter.

    Example:
    ```python
    class ReadingTime(App):
        @filter_handler("prePostsRender", priority=9)
        def add_reading_time(self, posts):
            ...
    ```

    Decorators can be stacked to attach one method to several filters.
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        declared = list(getattr(func, FILTER_ATTR, ()))
        setattr(func, FILTER_ATTR, [(name, priority)] + declared)
        return func
    return decorator
