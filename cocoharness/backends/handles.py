"""
Ownership-checked handles for backend resources.

Suites, observers and problems live inside a backend and are referred to by
Handle values instead of raw pointers. A HandleArena stores resources in
slots; every slot carries a generation counter that is bumped when the
resource is removed, so a handle kept after finalization is detected:

    arena = HandleArena("suite")
    handle = arena.insert(resource)
    arena.get(handle)      # -> resource
    arena.remove(handle)
    arena.get(handle)      # raises LifecycleError
"""

from dataclasses import dataclass
from typing import Generic, Iterator, List, Optional, TypeVar

from ..exceptions import LifecycleError

T = TypeVar("T")


@dataclass(frozen=True)
class Handle:
    """Opaque reference to a backend resource."""

    kind: str
    slot: int
    generation: int

    def __str__(self) -> str:
        return f"{self.kind}#{self.slot}.{self.generation}"


class HandleArena(Generic[T]):
    """Generational arena mapping handles to resources of one kind."""

    def __init__(self, kind: str):
        self.kind = kind
        self._resources: List[Optional[T]] = []
        self._generations: List[int] = []
        self._free: List[int] = []

    def insert(self, resource: T) -> Handle:
        """
        Store a resource and return its handle.

        Args:
            resource: Backend object to own

        Returns:
            Handle valid until the resource is removed
        """
        if self._free:
            slot = self._free.pop()
            self._resources[slot] = resource
        else:
            slot = len(self._resources)
            self._resources.append(resource)
            self._generations.append(0)
        return Handle(self.kind, slot, self._generations[slot])

    def get(self, handle: Handle) -> T:
        """
        Resolve a handle.

        Raises:
            LifecycleError: If the handle is stale or of another kind
        """
        self._check(handle)
        return self._resources[handle.slot]

    def remove(self, handle: Handle) -> T:
        """
        Release the resource behind a handle and invalidate the handle.

        Raises:
            LifecycleError: If the handle is stale or of another kind
        """
        self._check(handle)
        resource = self._resources[handle.slot]
        self._resources[handle.slot] = None
        self._generations[handle.slot] += 1
        self._free.append(handle.slot)
        return resource

    def handles(self) -> Iterator[Handle]:
        """Iterate over the handles of all live resources."""
        for slot, resource in enumerate(self._resources):
            if resource is not None:
                yield Handle(self.kind, slot, self._generations[slot])

    def _check(self, handle: Handle) -> None:
        if not isinstance(handle, Handle) or handle.kind != self.kind:
            raise LifecycleError(f"Expected a {self.kind} handle, got {handle!r}")
        if (
            handle.slot >= len(self._resources)
            or self._generations[handle.slot] != handle.generation
            or self._resources[handle.slot] is None
        ):
            raise LifecycleError(f"Stale {self.kind} handle {handle}: resource was already finalized")

    def __contains__(self, handle: object) -> bool:
        return (
            isinstance(handle, Handle)
            and handle.kind == self.kind
            and handle.slot < len(self._resources)
            and self._generations[handle.slot] == handle.generation
            and self._resources[handle.slot] is not None
        )

    def __len__(self) -> int:
        return sum(1 for resource in self._resources if resource is not None)
