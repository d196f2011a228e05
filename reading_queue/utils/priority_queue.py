"""Generic min-heap priority queue."""

from typing import Generic, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class PriorityQueue(Generic[T]):
    """
    Array-backed binary min-heap keyed by a numeric priority.

    Lower priority values come out first. Ties are broken by heap mechanics,
    not insertion order; encode a tiebreak into the priority if it matters.

    Time complexities: peek O(1), push/pop O(log n), bulk construction O(n).
    """

    def __init__(self, items: Optional[Iterable[Tuple[T, float]]] = None):
        self._heap: List[Tuple[float, T]] = []
        if items:
            self._heap = [(priority, item) for item, priority in items]
            self._heapify()

    @property
    def size(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def is_empty(self) -> bool:
        return not self._heap

    def push(self, item: T, priority: float) -> None:
        """Add an item with the given priority."""
        self._heap.append((priority, item))
        self._sift_up(len(self._heap) - 1)

    def peek(self) -> Optional[T]:
        """Return the lowest-priority item without removing it."""
        if not self._heap:
            return None
        return self._heap[0][1]

    def pop(self) -> Optional[T]:
        """Remove and return the lowest-priority item, or None if empty."""
        if not self._heap:
            return None

        if len(self._heap) == 1:
            return self._heap.pop()[1]

        top = self._heap[0]
        self._heap[0] = self._heap.pop()
        self._sift_down(0)
        return top[1]

    def clear(self) -> None:
        self._heap = []

    def to_array(self) -> List[T]:
        """Snapshot of the items in heap order (not sorted)."""
        return [item for _, item in self._heap]

    def _heapify(self) -> None:
        # Floyd: sift down every parent, last parent first
        for index in range(len(self._heap) // 2 - 1, -1, -1):
            self._sift_down(index)

    def _sift_up(self, index: int) -> None:
        heap = self._heap
        while index > 0:
            parent = (index - 1) // 2
            if heap[index][0] >= heap[parent][0]:
                break
            heap[index], heap[parent] = heap[parent], heap[index]
            index = parent

    def _sift_down(self, index: int) -> None:
        heap = self._heap
        size = len(heap)
        while True:
            left = 2 * index + 1
            right = 2 * index + 2
            smallest = index

            if left < size and heap[left][0] < heap[smallest][0]:
                smallest = left
            if right < size and heap[right][0] < heap[smallest][0]:
                smallest = right

            if smallest == index:
                break

            heap[index], heap[smallest] = heap[smallest], heap[index]
            index = smallest
