"""Base class for Ghost apps (lifecycle hooks and filter registration)."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Callable, Union

from apps.declarations import FILTER_ATTR, FilterDeclaration, FilterRegistration
from core.exceptions import ConfigurationError, HostContractError

logger = logging.getLogger(__name__)

FilterMapping = Mapping[str, Any]
FilterSource = Union[FilterMapping, Callable[[], FilterMapping]]


class App:
    """
    App is the base class for a standard Ghost App. Includes empty handlers for
    life cycle events.

    The host constructs the app with itself as the only argument, then drives
    install -> activate -> deactivate -> uninstall. ``activate`` and
    ``deactivate`` register and unregister the filters declared in ``filters``.
    """

    name: str = ""

    # A mapping of filter names to method names, or a callable returning one
    filters: FilterSource = {}

    # Filled per subclass from methods marked with @filter_handler
    _decorated_filters: dict[str, FilterDeclaration] = {}

    def __init__(self, ghost):
        self.app = ghost

        self.initialize()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        decorated = dict(cls._decorated_filters)
        for attr_name, value in cls.__dict__.items():
            for hook_name, priority in getattr(value, FILTER_ATTR, ()):
                decorated[hook_name] = FilterDeclaration(attr_name, priority)
        cls._decorated_filters = decorated

    def initialize(self):
        """A method that is run after the constructor and allows for special logic."""
        return None

    def install(self):
        """
        A method that will be called on installation.
        Can optionally return an awaitable if async.
        """
        return None

    def uninstall(self):
        """
        A method that will be called on uninstallation.
        Can optionally return an awaitable if async.
        """
        return None

    def activate(self):
        """
        A method that will be called when the App is enabled.
        Can optionally return an awaitable if async.
        """
        self.register_filters()

    def deactivate(self):
        """
        A method that will be called when the App is disabled.
        Can optionally return an awaitable if async.
        """
        self.unregister_filters()

    def register_filters(self, filters: FilterSource | None = None) -> None:
        """Register Ghost filters based on a passed in mapping (or ``self.filters``)."""
        register = self._filter_registry("register")

        def forward(registration: FilterRegistration) -> None:
            logger.debug(
                "Registering filter %s (priority=%s) for %s",
                registration.name, registration.priority, type(self).__name__,
            )
            register(*registration)

        self._each_filter(filters, forward)

    def unregister_filters(self, filters: FilterSource | None = None) -> None:
        """Unregister Ghost filters based on a passed in mapping (or ``self.filters``)."""
        unregister = self._filter_registry("unregister")

        def forward(registration: FilterRegistration) -> None:
            logger.debug(
                "Unregistering filter %s (priority=%s) for %s",
                registration.name, registration.priority, type(self).__name__,
            )
            unregister(*registration)

        self._each_filter(filters, forward)

    def _each_filter(
        self,
        filters: FilterSource | None,
        filter_data_handler: Callable[[FilterRegistration], None],
    ) -> None:
        """
        Normalize each passed in filter (or the declared ones if nothing is passed)
        and hand the resulting registration to ``filter_data_handler``.

        Every entry is resolved before the first handler call, so a misconfigured
        mapping never reaches the host registry.
        """
        if filters is None:
            filters = self.declared_filters()
        else:
            filters = self._filter_mapping(filters)

        registrations = [
            self._normalize_filter(filter_name, declaration)
            for filter_name, declaration in filters.items()
        ]

        for registration in registrations:
            filter_data_handler(registration)

    def declared_filters(self) -> dict[str, Any]:
        """Return the filters declared on the class, calling ``filters`` if it is callable."""
        declared = dict(self._filter_mapping(self._filters_source()))
        for hook_name, declaration in self._decorated_filters.items():
            if hook_name in declared:
                raise ConfigurationError(
                    f"Filter '{hook_name}' is declared both in filters and by "
                    f"@filter_handler on '{declaration.method_name}'",
                    hook_name=hook_name,
                    method_name=declaration.method_name,
                )
            declared[hook_name] = declaration
        return declared

    def _filters_source(self) -> FilterSource:
        # A zero-argument function stored on the class must not be bound to self
        filters = inspect.getattr_static(self, "filters")
        if isinstance(filters, staticmethod):
            return filters.__func__
        if inspect.isfunction(filters) and not inspect.signature(filters).parameters:
            return filters
        return self.filters

    def _filter_mapping(self, filters: FilterSource) -> FilterMapping:
        if callable(filters):
            filters = filters()

        if not isinstance(filters, Mapping):
            raise ConfigurationError(
                f"{type(self).__name__} filters must be a mapping, got {type(filters).__name__}"
            )
        return filters

    def _normalize_filter(self, filter_name: str, declaration: object) -> FilterRegistration:
        parsed = FilterDeclaration.parse(filter_name, declaration)
        handler = getattr(self, parsed.method_name, None)
        if handler is None or not callable(handler):
            raise ConfigurationError(
                f"Filter '{filter_name}' refers to missing method "
                f"'{parsed.method_name}' on {type(self).__name__}",
                hook_name=filter_name,
                method_name=parsed.method_name,
            )
        return FilterRegistration(filter_name, parsed.priority, handler)

    def _filter_registry(self, operation: str) -> Callable[..., Any]:
        registry = getattr(self.app, "filters", None)
        if registry is None:
            raise HostContractError(
                f"{type(self).__name__} host app has no filter registry"
            )
        method = getattr(registry, operation, None)
        if not callable(method):
            raise HostContractError(
                f"{type(self).__name__} host filter registry has no callable {operation}()"
            )
        return method

    @classmethod
    def extend(cls, overrides: Mapping[str, Any] | None = None, **members: Any) -> type[App]:
        """
        Offer an easy to use extend method.

        Returns a new subclass whose members are ``overrides`` merged with the
        keyword arguments; everything else is inherited.
        """
        namespace = dict(overrides or {})
        namespace.update(members)
        class_name = namespace.pop("__name__", None) or f"Extended{cls.__name__}"
        namespace.setdefault("__module__", cls.__module__)
        return type(cls)(class_name, (cls,), namespace)
