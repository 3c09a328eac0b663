"""
Plugin registry for managing pattern generators.
"""

import logging
from typing import Dict, List, Optional, Type, Union

from .base import PatternParameters, PatternPlugin, PatternStrategy, StrokedPolygonSet
from .plugins import HexPatternPlugin, StripePatternPlugin

logger = logging.getLogger(__name__)

StrategyKey = Union[str, PatternStrategy]


def _key(strategy: StrategyKey) -> str:
    if isinstance(strategy, PatternStrategy):
        return strategy.value
    if isinstance(strategy, str):
        return strategy
    raise TypeError(f"Pattern key must be a string or PatternStrategy, got {type(strategy).__name__}")


class PatternRegistry:
    """
    Registry mapping pattern keys to plugin classes.

    Each rendering collaborator owns its own registry; there is no shared
    process-wide instance. Keys are plain strings such as ``"hex"``;
    PatternStrategy members are accepted wherever a key is.
    """

    def __init__(self):
        self._plugins: Dict[str, Type[PatternPlugin]] = {}

    def register(self, strategy: StrategyKey, plugin_class: Type[PatternPlugin]) -> None:
        """
        Register a pattern plugin.

        Args:
            strategy: The pattern key
            plugin_class: The plugin class (not instance) to register

        Raises:
            TypeError: If plugin_class is not a subclass of PatternPlugin
        """
        if not (isinstance(plugin_class, type) and issubclass(plugin_class, PatternPlugin)):
            name = getattr(plugin_class, "__name__", repr(plugin_class))
            raise TypeError(f"{name} must be a subclass of PatternPlugin")

        key = _key(strategy)
        if key in self._plugins:
            logger.debug("Replacing pattern plugin for '%s'", key)
        self._plugins[key] = plugin_class

    def unregister(self, strategy: StrategyKey) -> None:
        """
        Unregister a pattern plugin.

        Args:
            strategy: The pattern key to unregister
        """
        self._plugins.pop(_key(strategy), None)

    def get_plugin(self, strategy: StrategyKey, **kwargs) -> Optional[PatternPlugin]:
        """
        Get an instance of a registered plugin.

        Args:
            strategy: The pattern key to retrieve
            **kwargs: Passed to the plugin constructor

        Returns:
            Instance of the plugin, or None if not found
        """
        plugin_class = self._plugins.get(_key(strategy))
        if plugin_class:
            return plugin_class(**kwargs)
        return None

    def get_plugin_class(self, strategy: StrategyKey) -> Optional[Type[PatternPlugin]]:
        """
        Get the class of a registered plugin.

        Args:
            strategy: The pattern key to retrieve

        Returns:
            The plugin class, or None if not found
        """
        return self._plugins.get(_key(strategy))

    def generate(
        self,
        strategy: StrategyKey,
        parameters: PatternParameters,
        boundary,
        aspect_ratio: float,
        is_legend: bool = False
    ) -> Optional[StrokedPolygonSet]:
        """
        Look up a pattern by key and generate it for one boundary.

        Raises:
            KeyError: If no plugin is registered under the key
        """
        plugin = self.get_plugin(strategy)
        if plugin is None:
            raise KeyError(f"No pattern registered for key '{_key(strategy)}'")
        return plugin.generate(parameters, boundary, aspect_ratio, is_legend)

    def list_strategies(self) -> List[str]:
        """
        List all registered pattern keys.

        Returns:
            List of keys in registration order
        """
        return list(self._plugins.keys())

    def is_registered(self, strategy: StrategyKey) -> bool:
        """Check if a pattern key is registered."""
        return _key(strategy) in self._plugins

    def clear(self) -> None:
        """Clear all registered plugins."""
        self._plugins.clear()

    def __len__(self) -> int:
        """Get the number of registered plugins."""
        return len(self._plugins)

    def __contains__(self, strategy: StrategyKey) -> bool:
        """Check if a pattern key is registered using 'in' operator."""
        return self.is_registered(strategy)


def create_default_registry() -> PatternRegistry:
    """Build a registry holding the built-in patterns."""
    registry = PatternRegistry()
    registry.register(PatternStrategy.HEX, HexPatternPlugin)
    registry.register(PatternStrategy.STRIPE, StripePatternPlugin)
    return registry
