"""Registry of top-K selection strategies.

Strategies are stateless, so one instance per name is created on first use
and shared.
"""

import logging

from services.recommendation.base import SelectionStrategy

logger = logging.getLogger(__name__)

_registry: dict[str, SelectionStrategy] = {}


def _create_strategy(name: str) -> SelectionStrategy:
    """Factory: create a selection strategy by name."""
    from services.recommendation.ranker import HeapSelection, SortSelection

    if name == "sort":
        return SortSelection()
    elif name == "heap":
        return HeapSelection()
    else:
        raise ValueError(f"Unknown selection strategy: {name}")


def get_strategy(name: str) -> SelectionStrategy:
    """Get a strategy by name, creating it on first access."""
    if name not in _registry:
        _registry[name] = _create_strategy(name)
        logger.info("Selection strategy ready: %s", name)
    return _registry[name]


def clear() -> None:
    """Drop all strategy instances. Useful for testing."""
    _registry.clear()
