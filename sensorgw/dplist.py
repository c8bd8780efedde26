"""A doubly linked list with clamped, index-based access."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional


@dataclass(eq=False)
class ListNode:
    """A node of a DoublyLinkedList."""

    element: Any
    prev: Optional["ListNode"] = field(default=None, repr=False)
    next: Optional["ListNode"] = field(default=None, repr=False)


class DoublyLinkedList:
    """Doubly linked list whose indices are clamped to the ends of the list.

    An index of 0 or below means the first node; an index past the end means
    the last node (or, for insertion, the position after it).
    """

    def __init__(
        self,
        copy: Optional[Callable[[Any], Any]] = None,
        compare: Optional[Callable[[Any, Any], int]] = None,
    ) -> None:
        self._copy = copy
        self._compare = compare
        self.head: Optional[ListNode] = None
        self._size = 0

    def _nodes(self) -> Iterator[ListNode]:
        node = self.head
        while node is not None:
            yield node
            node = node.next

    def insert_at_index(self, element: Any, index: int, insert_copy: bool = False) -> "DoublyLinkedList":
        """Insert element at index; a copy is stored when insert_copy is set."""
        if insert_copy and self._copy is not None:
            element = self._copy(element)
        new = ListNode(element)
        if self.head is None:
            self.head = new
        elif index <= 0:
            new.next = self.head
            self.head.prev = new
            self.head = new
        elif index >= self._size:
            last = self.reference_at_index(self._size)
            new.prev = last
            last.next = new
        else:
            ref = self.reference_at_index(index)
            new.prev = ref.prev
            new.next = ref
            if ref.prev is not None:
                ref.prev.next = new
            ref.prev = new
        self._size += 1
        return self

    def remove_at_index(self, index: int) -> Any:
        """Remove the node at the clamped index and return its element.

        Returns None when the list is empty.
        """
        node = self.reference_at_index(index)
        if node is None:
            return None
        if node.prev is not None:
            node.prev.next = node.next
        if node.next is not None:
            node.next.prev = node.prev
        if node is self.head:
            self.head = node.next
        node.prev = node.next = None
        self._size -= 1
        return node.element

    def reference_at_index(self, index: int) -> Optional[ListNode]:
        """Return the node at the clamped index, or None if the list is empty."""
        if self.head is None:
            return None
        node = self.head
        count = 0
        while node.next is not None and count < index:
            node = node.next
            count += 1
        return node

    def element_at_index(self, index: int) -> Any:
        """Return the element at the clamped index, or None if empty."""
        node = self.reference_at_index(index)
        return None if node is None else node.element

    def index_of(self, element: Any) -> int:
        """Return the index of the first matching element, or -1."""
        for index, node in enumerate(self._nodes()):
            if self._compare is not None:
                if self._compare(node.element, element) == 0:
                    return index
            elif node.element == element:
                return index
        return -1

    def element_at_reference(self, reference: Optional[ListNode]) -> Any:
        """Return the element of reference if it belongs to this list, else None."""
        if reference is None:
            return None
        for node in self._nodes():
            if node is reference:
                return node.element
        return None

    def clear(self) -> None:
        """Remove every node."""
        self.head = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Any]:
        for node in self._nodes():
            yield node.element