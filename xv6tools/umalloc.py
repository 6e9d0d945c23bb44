"""First-fit heap allocator over a growable arena, with a circular free list."""

from __future__ import annotations

HEADER_SIZE = 16
MIN_GROWTH = 4096  # smallest arena growth, in headers

_BASE = 0  # sentinel header, below every arena address


class Heap:
    """Hands out byte addresses from an arena that starts at ``start``.

    ``limit`` caps the total number of bytes the arena may grow by; when it
    is reached, ``malloc`` returns None.
    """

    def __init__(self, start: int = 4096, limit: int | None = None) -> None:
        if start <= 0 or start % HEADER_SIZE:
            raise ValueError("start must be a positive multiple of the header size")
        if limit is not None and limit < 0:
            raise ValueError("limit must not be negative")
        self._brk = start // HEADER_SIZE
        self._end = None if limit is None else self._brk + limit // HEADER_SIZE
        self._next: dict[int, int] = {}
        self._size: dict[int, int] = {}
        self._allocated: set[int] = set()
        self._freep: int | None = None

    def _sbrk(self, units: int) -> int | None:
        if self._end is not None and self._brk + units > self._end:
            return None
        header = self._brk
        self._brk += units
        return header

    def _morecore(self, units: int) -> int | None:
        units = max(units, MIN_GROWTH)
        header = self._sbrk(units)
        if header is None:
            return None
        self._size[header] = units
        self._release(header)
        return self._freep

    def malloc(self, nbytes: int) -> int | None:
        """Address of a new block of at least ``nbytes``, or None if out of memory."""
        if nbytes < 0:
            raise ValueError("size must not be negative")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        if self._freep is None:
            self._next[_BASE] = _BASE
            self._size[_BASE] = 0
            self._freep = _BASE
        prevp = self._freep
        p = self._next[prevp]
        while True:
            if self._size[p] >= nunits:
                if self._size[p] == nunits:
                    self._next[prevp] = self._next.pop(p)
                else:
                    self._size[p] -= nunits
                    p += self._size[p]
                    self._size[p] = nunits
                self._freep = prevp
                self._allocated.add(p)
                return (p + 1) * HEADER_SIZE
            if p == self._freep:
                grown = self._morecore(nunits)
                if grown is None:
                    return None
                p = grown
            prevp, p = p, self._next[p]

    def free(self, ptr: int) -> None:
        """Return a block obtained from ``malloc`` to the free list."""
        header = ptr // HEADER_SIZE - 1
        if ptr % HEADER_SIZE or header not in self._allocated:
            raise ValueError(f"{ptr} is not an allocated block")
        self._allocated.remove(header)
        self._release(header)

    def _release(self, bp: int) -> None:
        nxt, size = self._next, self._size
        p = self._freep
        assert p is not None
        while not (p < bp < nxt[p]):
            if p >= nxt[p] and (bp > p or bp < nxt[p]):
                break
            p = nxt[p]
        q = nxt[p]
        if bp + size[bp] == q:
            size[bp] += size.pop(q)
            nxt[bp] = nxt.pop(q)
        else:
            nxt[bp] = q
        if p + size[p] == bp:
            size[p] += size.pop(bp)
            nxt[p] = nxt.pop(bp)
        else:
            nxt[p] = bp
        self._freep = p

    def free_blocks(self) -> list[tuple[int, int]]:
        """Free blocks as (header address, size in bytes), in address order."""
        if self._freep is None:
            return []
        blocks = []
        p = self._next[_BASE]
        while p != _BASE:
            blocks.append((p * HEADER_SIZE, self._size[p] * HEADER_SIZE))
            p = self._next[p]
        return blocks