"""Two-level page tables kept in a simulated physical memory."""

from __future__ import annotations

import struct
from collections.abc import Callable, Iterable

from xv6tools.mmu import (
    KERNBASE,
    NPDENTRIES,
    NPTENTRIES,
    PGSIZE,
    PTE_P,
    PTE_U,
    PTE_W,
    pdx,
    pgrounddown,
    pgroundup,
    pte_addr,
    pte_flags,
    ptx,
)

_MASK = 0xFFFFFFFF
_ENTRY = struct.Struct("<I")
_TABLE = struct.Struct(f"<{NPDENTRIES}I")
_USER_TOP = 0x3FA00000  # user part released when an address space is freed


class KernelPanic(RuntimeError):
    """An invariant of the kernel was broken."""


class PhysicalMemory:
    """Page-granular physical memory from ``start`` spanning ``npages`` pages."""

    def __init__(self, start: int = 0x400000, npages: int = 256) -> None:
        if start <= 0 or start % PGSIZE:
            raise ValueError("start must be a positive multiple of the page size")
        if npages <= 0:
            raise ValueError("npages must be positive")
        self.start = start
        self.npages = npages
        self.end = start + npages * PGSIZE
        if self.end > _MASK + 1:
            raise ValueError("memory must lie below 4 GiB")
        self._data = bytearray(npages * PGSIZE)
        # Pages are handed out from the top of the free list.
        self._free = list(range(start, self.end, PGSIZE))
        self._free_set = set(self._free)

    @property
    def free_pages(self) -> int:
        return len(self._free)

    def kalloc(self) -> int | None:
        """Physical address of a free page, or None when memory is exhausted."""
        if not self._free:
            return None
        pa = self._free.pop()
        self._free_set.discard(pa)
        return pa

    def kfree(self, pa: int) -> None:
        """Return a page obtained from ``kalloc``."""
        if pa % PGSIZE or not self.start <= pa < self.end or pa in self._free_set:
            raise KernelPanic("kfree")
        self._free.append(pa)
        self._free_set.add(pa)

    def _offset(self, pa: int, n: int) -> int:
        if n < 0 or pa < self.start or pa + n > self.end:
            raise ValueError(f"range {pa:#x}+{n} lies outside physical memory")
        return pa - self.start

    def read(self, pa: int, n: int) -> bytes:
        off = self._offset(pa, n)
        return bytes(self._data[off : off + n])

    def write(self, pa: int, data: bytes) -> None:
        data = bytes(data)
        off = self._offset(pa, len(data))
        self._data[off : off + len(data)] = data


class AddressSpace:
    """A page directory with its page tables and user pages.

    ``kmap`` lists kernel mappings as (virt, phys_start, phys_end, perm);
    every address space gets them when it is created.
    """

    def __init__(
        self,
        memory: PhysicalMemory,
        kmap: Iterable[tuple[int, int, int, int]] = (),
    ) -> None:
        self.memory = memory
        self.kmap = tuple(tuple(m) for m in kmap)
        pgdir = memory.kalloc()
        if pgdir is None:
            raise MemoryError("no memory for a page directory")
        memory.write(pgdir, bytes(PGSIZE))
        self.pgdir: int | None = pgdir
        try:
            for virt, phys_start, phys_end, perm in self.kmap:
                self.map_pages(virt, (phys_end - phys_start) & _MASK, phys_start, perm)
        except MemoryError:
            self.free()
            raise

    def _entry(self, pa: int) -> int:
        return _ENTRY.unpack(self.memory.read(pa, _ENTRY.size))[0]

    def _set_entry(self, pa: int, value: int) -> None:
        self.memory.write(pa, _ENTRY.pack(value & _MASK))

    def _directory(self) -> int:
        if self.pgdir is None:
            raise KernelPanic("address space has been freed")
        return self.pgdir

    def walk(self, va: int, alloc: bool = False) -> int | None:
        """Physical address of the entry mapping ``va``, creating its table if ``alloc``."""
        va &= _MASK
        pde_pa = self._directory() + pdx(va) * _ENTRY.size
        pde = self._entry(pde_pa)
        if pde & PTE_P:
            table = pte_addr(pde)
        else:
            if not alloc:
                return None
            table = self.memory.kalloc()
            if table is None:
                return None
            self.memory.write(table, bytes(PGSIZE))
            self._set_entry(pde_pa, table | PTE_P | PTE_W | PTE_U)
        return table + ptx(va) * _ENTRY.size

    def map_pages(self, va: int, size: int, pa: int, perm: int) -> None:
        """Map the pages covering ``va``..``va+size`` to physical memory from ``pa``."""
        a = pgrounddown(va)
        last = pgrounddown((va + size - 1) & _MASK)
        while True:
            pte = self.walk(a, True)
            if pte is None:
                raise MemoryError("no memory for a page table")
            if self._entry(pte) & PTE_P:
                raise KernelPanic("remap")
            self._set_entry(pte, pa | perm | PTE_P)
            if a == last:
                break
            a = (a + PGSIZE) & _MASK
            pa = (pa + PGSIZE) & _MASK

    def init_code(self, code: bytes) -> None:
        """Load ``code``, smaller than a page, at address 0."""
        if len(code) >= PGSIZE:
            raise KernelPanic("inituvm: more than a page")
        mem = self.memory.kalloc()
        if mem is None:
            raise MemoryError("no memory for the initial code")
        self.memory.write(mem, bytes(PGSIZE))
        self.map_pages(0, PGSIZE, mem, PTE_W | PTE_U)
        self.memory.write(mem, code)

    def load(
        self,
        va: int,
        reader: Callable[[int, int], bytes],
        offset: int,
        sz: int,
    ) -> None:
        """Fill already-mapped pages from ``va`` with ``sz`` bytes read at ``offset``.

        ``reader(offset, n)`` returns the bytes at ``offset``.
        """
        if va % PGSIZE:
            raise KernelPanic("loaduvm: addr must be page aligned")
        for i in range(0, sz, PGSIZE):
            pte = self.walk(va + i, False)
            if pte is None:
                raise KernelPanic("loaduvm: address should exist")
            pa = pte_addr(self._entry(pte))
            n = min(sz - i, PGSIZE)
            data = reader(offset + i, n)
            if len(data) != n:
                raise OSError(f"loaduvm: short read at offset {offset + i}")
            self.memory.write(pa, data)

    def alloc(self, oldsz: int, newsz: int) -> int:
        """Grow user memory from ``oldsz`` to ``newsz`` and return the new size."""
        if newsz >= KERNBASE:
            raise ValueError(f"size {newsz:#x} reaches into kernel space")
        if newsz < oldsz:
            return oldsz
        a = pgroundup(oldsz)
        while a < newsz:
            mem = self.memory.kalloc()
            if mem is None:
                self.dealloc(newsz, oldsz)
                raise MemoryError("allocuvm out of memory")
            self.memory.write(mem, bytes(PGSIZE))
            try:
                self.map_pages(a, PGSIZE, mem, PTE_W | PTE_U)
            except MemoryError:
                self.memory.kfree(mem)
                self.dealloc(newsz, oldsz)
                raise
            a += PGSIZE
        return newsz

    def dealloc(self, oldsz: int, newsz: int) -> int:
        """Shrink user memory from ``oldsz`` to ``newsz`` and return the new size."""
        if newsz >= oldsz:
            return oldsz
        a = pgroundup(newsz)
        while a < oldsz:
            pte = self.walk(a, False)
            if pte is None:
                a += (NPTENTRIES - 1) * PGSIZE
            else:
                entry = self._entry(pte)
                if entry & PTE_P:
                    pa = pte_addr(entry)
                    if pa == 0:
                        raise KernelPanic("kfree")
                    self.memory.kfree(pa)
                    self._set_entry(pte, 0)
            a += PGSIZE
        return newsz

    def free(self) -> None:
        """Release the user pages, the page tables and the directory."""
        if self.pgdir is None:
            raise KernelPanic("freevm: no pgdir")
        self.dealloc(_USER_TOP, 0)
        entries = _TABLE.unpack(self.memory.read(self.pgdir, PGSIZE))
        for entry in entries[: NPDENTRIES - 2]:
            if entry & PTE_P:
                self.memory.kfree(pte_addr(entry))
        self.memory.kfree(self.pgdir)
        self.pgdir = None

    def clear_user(self, va: int) -> None:
        """Make the page at ``va`` inaccessible to user code."""
        pte = self.walk(va, False)
        if pte is None:
            raise KernelPanic("clearpteu")
        self._set_entry(pte, self._entry(pte) & ~PTE_U)

    def copy(self, sz: int) -> AddressSpace:
        """A new address space holding a copy of the first ``sz`` bytes of user memory."""
        child = AddressSpace(self.memory, self.kmap)
        try:
            for i in range(0, sz, PGSIZE):
                pte = self.walk(i, False)
                if pte is None:
                    raise KernelPanic("copyuvm: pte should exist")
                entry = self._entry(pte)
                if not entry & PTE_P:
                    raise KernelPanic("copyuvm: page not present")
                mem = self.memory.kalloc()
                if mem is None:
                    raise MemoryError("no memory to copy a page")
                self.memory.write(mem, self.memory.read(pte_addr(entry), PGSIZE))
                try:
                    child.map_pages(i, PGSIZE, mem, pte_flags(entry))
                except MemoryError:
                    self.memory.kfree(mem)
                    raise
        except MemoryError:
            child.free()
            raise
        return child

    def user_to_kernel(self, va: int) -> int | None:
        """Physical address of the user page at ``va``, or None if not user-accessible."""
        pte = self.walk(va, False)
        if pte is None:
            return None
        entry = self._entry(pte)
        if not entry & PTE_P or not entry & PTE_U:
            return None
        return pte_addr(entry)

    def copy_out(self, va: int, data: bytes) -> None:
        """Copy ``data`` to user address ``va``."""
        data = bytes(data)
        pos = 0
        while pos < len(data):
            va0 = pgrounddown(va)
            pa0 = self.user_to_kernel(va0)
            if pa0 is None:
                raise ValueError(f"address {va0:#x} is not mapped for user access")
            n = min(PGSIZE - (va - va0), len(data) - pos)
            self.memory.write(pa0 + (va - va0), data[pos : pos + n])
            pos += n
            va = va0 + PGSIZE