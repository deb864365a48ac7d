"""
Compatibility rewrites applied to tile entity data while loading.

Older editors wrote some tile entities in layouts newer readers do not
understand (sign text, skull owners...). A handler recognises the affected
block states and rewrites their data. No handlers ship by default; callers
register the ones they need and hand the pipeline to the reader.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List, Optional

from nbtlib.tag import Compound

from spongeschem.palette import BlockState

logger = logging.getLogger(__name__)

TagMap = Compound


class CompatibilityHandler(ABC):
    """One rewrite rule for tile entity data."""

    @abstractmethod
    def applies(self, state: BlockState) -> bool:
        """Whether this handler should rewrite data for `state`."""

    @abstractmethod
    def rewrite(self, state: BlockState, values: TagMap) -> TagMap:
        """
        Rewrite the tile entity entries of a block.

        Args:
            state: Block state of the tile entity
            values: Entries of the tile entity compound, owned by the caller

        Returns:
            The entries to keep; may be `values` itself after in-place edits
        """


class CompatibilityPipeline:
    """
    Ordered, append-only list of handlers.

    Each applicable handler sees the output of the one registered before it.
    Register everything before sharing the pipeline between threads; it is
    only read while decoding.
    """

    def __init__(self, handlers: Optional[Iterable[CompatibilityHandler]] = None):
        self._handlers: List[CompatibilityHandler] = []
        for handler in handlers or ():
            self.register(handler)

    def register(self, handler: CompatibilityHandler) -> None:
        if not isinstance(handler, CompatibilityHandler):
            raise TypeError(f"Expected a CompatibilityHandler, got {type(handler).__name__}")
        self._handlers.append(handler)

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[CompatibilityHandler]:
        return iter(tuple(self._handlers))

    def apply(self, state: BlockState, values: TagMap) -> TagMap:
        """Run every applicable handler in registration order."""
        for handler in self._handlers:
            if handler.applies(state):
                logger.debug("Applying %s to %s", type(handler).__name__, state)
                values = handler.rewrite(state, values)
        return values
