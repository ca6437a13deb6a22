"""NodeIdAllocator - collision-free node ids for one editing session."""

import re
from collections.abc import Iterable

from nebula_studio.models import NodeType

_TRAILING_NUMBER = re.compile(r"(\d+)$")


def trailing_number(node_id: str) -> int | None:
    """Return the integer suffix of ``node_id``, if it has one."""
    match = _TRAILING_NUMBER.search(node_id)
    return int(match.group(1)) if match else None


class NodeIdAllocator:
    """Allocates ``<type>-<n>`` ids from a monotonic counter.

    The counter is seeded once, at load time, above every numeric suffix
    among the loaded node ids. Numbers are never reused after a node is
    deleted, so an allocated id can never collide with a node in the session.

    Example:
        allocator = NodeIdAllocator()
        allocator.seed(["transform-7", "input-topic"])
        allocator.next("ai-process")  # "ai-process-8"
    """

    def __init__(self) -> None:
        self._counter = 0
        self._allocated = 0

    def seed(self, node_ids: Iterable[str]) -> int:
        """Seed the counter from the loaded node ids and return it.

        Raises:
            RuntimeError: If ids have already been allocated from this counter.
        """
        if self._allocated:
            raise RuntimeError("NodeIdAllocator must be seeded before any id is allocated")

        numbers = [n for n in (trailing_number(i) for i in node_ids) if n is not None]
        self._counter = max(numbers) + 1 if numbers else 0
        return self._counter

    def peek(self) -> int:
        """The number the next allocation will use."""
        return self._counter

    def next(self, node_type: NodeType | str) -> str:
        """Allocate the next id for a node of ``node_type``."""
        node_id = f"{NodeType(node_type).value}-{self._counter}"
        self._counter += 1
        self._allocated += 1
        return node_id
