"""
Linkhub Backend: Ordered Connection Set
==========================================

What:  An insertion-ordered set of user ids.
Who:   Built by UserService.connection_set() from a user's connection rows;
       consumed by GraphService and MessageService.

A user's connections are used two ways:
    - as a set:       "is B in A's connections?" (message authorization,
                      excluding direct connections from network size)
    - as a sequence:  "the first five mutual connections, in A's follow order"

A dict keeps insertion order and gives O(1) membership, so one structure
serves both.
"""

import uuid
from typing import Dict, Iterable, Iterator, List


class ConnectionSet:
    """
    Insertion-ordered set of user ids.

    Re-adding an existing id keeps its original position.

    Example:
        >>> a = ConnectionSet([b_id, c_id])
        >>> b = ConnectionSet([c_id, d_id])
        >>> list(a.intersection(b))
        [c_id]
    """

    __slots__ = ("_ids",)

    def __init__(self, ids: Iterable[uuid.UUID] = ()):
        self._ids: Dict[uuid.UUID, None] = dict.fromkeys(ids)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._ids

    def __iter__(self) -> Iterator[uuid.UUID]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConnectionSet):
            return NotImplemented
        return list(self._ids) == list(other._ids)

    def __repr__(self) -> str:
        return f"ConnectionSet({list(self._ids)!r})"

    def add(self, user_id: uuid.UUID) -> bool:
        """Append `user_id`; returns False if it was already present."""
        if user_id in self._ids:
            return False
        self._ids[user_id] = None
        return True

    def discard(self, user_id: uuid.UUID) -> bool:
        """Remove `user_id` if present; returns whether it was removed."""
        if user_id not in self._ids:
            return False
        del self._ids[user_id]
        return True

    def update(self, ids: Iterable[uuid.UUID]) -> None:
        for user_id in ids:
            self.add(user_id)

    def intersection(self, other: "ConnectionSet") -> "ConnectionSet":
        """Ids present in both sets, in THIS set's order."""
        return ConnectionSet(uid for uid in self._ids if uid in other)

    def difference(self, *others: Iterable[uuid.UUID]) -> "ConnectionSet":
        """Ids of this set absent from every one of `others`, order kept."""
        excluded = set()
        for other in others:
            excluded.update(other)
        return ConnectionSet(uid for uid in self._ids if uid not in excluded)

    def first(self, n: int) -> List[uuid.UUID]:
        """The first `n` ids in insertion order."""
        result: List[uuid.UUID] = []
        for user_id in self._ids:
            if len(result) >= n:
                break
            result.append(user_id)
        return result
