"""x86 memory-management definitions: descriptors, paging helpers and memory layout.

Addresses and page-table entries are 32 bits wide; arithmetic wraps like the
hardware's.
"""

from __future__ import annotations

from dataclasses import dataclass

# Width of an address or page-table entry.
UINTP_BITS = 32
_MASK = (1 << UINTP_BITS) - 1

# Memory layout.
EXTMEM = 0x100000  # start of extended memory
PHYSTOP = 0xE000000  # top of physical memory
DEVSPACE = 0xFE000000  # other devices sit at high addresses
KERNBASE = 0x80000000  # first kernel virtual address
DEVBASE = 0xFE000000  # first device virtual address
KERNLINK = KERNBASE + EXTMEM  # address the kernel is linked at

# Eflags register.
FL_CF = 0x00000001
FL_PF = 0x00000004
FL_AF = 0x00000010
FL_ZF = 0x00000040
FL_SF = 0x00000080
FL_TF = 0x00000100
FL_IF = 0x00000200
FL_DF = 0x00000400
FL_OF = 0x00000800
FL_IOPL_MASK = 0x00003000
FL_IOPL_0 = 0x00000000
FL_IOPL_1 = 0x00001000
FL_IOPL_2 = 0x00002000
FL_IOPL_3 = 0x00003000
FL_NT = 0x00004000
FL_RF = 0x00010000
FL_VM = 0x00020000
FL_AC = 0x00040000
FL_VIF = 0x00080000
FL_VIP = 0x00100000
FL_ID = 0x00200000

# Control register flags.
CR0_PE = 0x00000001
CR0_MP = 0x00000002
CR0_EM = 0x00000004
CR0_TS = 0x00000008
CR0_ET = 0x00000010
CR0_NE = 0x00000020
CR0_WP = 0x00010000
CR0_AM = 0x00040000
CR0_NW = 0x20000000
CR0_CD = 0x40000000
CR0_PG = 0x80000000
CR4_PSE = 0x00000010

# Segment numbers in the global descriptor table.
SEG_KCODE = 1
SEG_KDATA = 2
SEG_KCPU = 3
SEG_UCODE = 4
SEG_UDATA = 5
SEG_TSS = 6

DPL_USER = 0x3

# Application segment type bits.
STA_X = 0x8
STA_E = 0x4
STA_C = 0x4
STA_W = 0x2
STA_R = 0x2
STA_A = 0x1

# System segment type bits.
STS_T16A = 0x1
STS_LDT = 0x2
STS_T16B = 0x3
STS_CG16 = 0x4
STS_TG = 0x5
STS_IG16 = 0x6
STS_TG16 = 0x7
STS_T32A = 0x9
STS_T32B = 0xB
STS_CG32 = 0xC
STS_IG32 = 0xE
STS_TG32 = 0xF

# Paging.
NPDENTRIES = 1024
NPTENTRIES = 1024
PGSIZE = 4096
PGSHIFT = 12
PTXSHIFT = 12
PDXSHIFT = 22
PXMASK = 0x3FF

# Page-table and page-directory entry flags.
PTE_P = 0x001
PTE_W = 0x002
PTE_U = 0x004
PTE_PWT = 0x008
PTE_PCD = 0x010
PTE_A = 0x020
PTE_D = 0x040
PTE_PS = 0x080
PTE_MBZ = 0x180


def _encode(obj: object, layout: tuple[tuple[str, int], ...]) -> bytes:
    value = 0
    shift = 0
    for name, width in layout:
        value |= (int(getattr(obj, name)) & ((1 << width) - 1)) << shift
        shift += width
    return value.to_bytes(shift // 8, "little")


@dataclass
class SegmentDescriptor:
    """A GDT segment descriptor; fields wider than their bit width are truncated."""

    lim_15_0: int = 0
    base_15_0: int = 0
    base_23_16: int = 0
    type: int = 0
    s: int = 0
    dpl: int = 0
    p: int = 0
    lim_19_16: int = 0
    avl: int = 0
    rsv1: int = 0
    db: int = 0
    g: int = 0
    base_31_24: int = 0

    _LAYOUT = (
        ("lim_15_0", 16),
        ("base_15_0", 16),
        ("base_23_16", 8),
        ("type", 4),
        ("s", 1),
        ("dpl", 2),
        ("p", 1),
        ("lim_19_16", 4),
        ("avl", 1),
        ("rsv1", 1),
        ("db", 1),
        ("g", 1),
        ("base_31_24", 8),
    )

    def encode(self) -> bytes:
        """The eight bytes the processor reads."""
        return _encode(self, self._LAYOUT)


@dataclass
class GateDescriptor:
    """An IDT interrupt or trap gate."""

    off_15_0: int = 0
    cs: int = 0
    args: int = 0
    rsv1: int = 0
    type: int = 0
    s: int = 0
    dpl: int = 0
    p: int = 0
    off_31_16: int = 0

    _LAYOUT = (
        ("off_15_0", 16),
        ("cs", 16),
        ("args", 5),
        ("rsv1", 3),
        ("type", 4),
        ("s", 1),
        ("dpl", 2),
        ("p", 1),
        ("off_31_16", 16),
    )

    def encode(self) -> bytes:
        """The eight bytes the processor reads."""
        return _encode(self, self._LAYOUT)


def seg(type: int, base: int, lim: int, dpl: int) -> SegmentDescriptor:
    """Normal segment with a limit in 4 KiB units and 32-bit operands."""
    base &= _MASK
    lim &= _MASK
    return SegmentDescriptor(
        lim_15_0=(lim >> 12) & 0xFFFF,
        base_15_0=base & 0xFFFF,
        base_23_16=(base >> 16) & 0xFF,
        type=type,
        s=1,
        dpl=dpl,
        p=1,
        lim_19_16=(lim >> 28) & 0xF,
        avl=0,
        rsv1=0,
        db=1,
        g=1,
        base_31_24=(base >> 24) & 0xFF,
    )


def seg16(type: int, base: int, lim: int, dpl: int) -> SegmentDescriptor:
    """Segment with a byte-granular limit."""
    base &= _MASK
    lim &= _MASK
    return SegmentDescriptor(
        lim_15_0=lim & 0xFFFF,
        base_15_0=base & 0xFFFF,
        base_23_16=(base >> 16) & 0xFF,
        type=type,
        s=1,
        dpl=dpl,
        p=1,
        lim_19_16=(lim >> 16) & 0xF,
        avl=0,
        rsv1=0,
        db=1,
        g=0,
        base_31_24=(base >> 24) & 0xFF,
    )


def gate(istrap: bool, sel: int, off: int, dpl: int) -> GateDescriptor:
    """Interrupt gate, or trap gate when ``istrap``; a trap gate leaves FL_IF alone."""
    off &= _MASK
    return GateDescriptor(
        off_15_0=off & 0xFFFF,
        cs=sel,
        args=0,
        rsv1=0,
        type=STS_TG32 if istrap else STS_IG32,
        s=0,
        dpl=dpl,
        p=1,
        off_31_16=off >> 16,
    )


def pdx(va: int) -> int:
    """Page-directory index of a virtual address."""
    return ((va & _MASK) >> PDXSHIFT) & PXMASK


def ptx(va: int) -> int:
    """Page-table index of a virtual address."""
    return ((va & _MASK) >> PTXSHIFT) & PXMASK


def pgaddr(d: int, t: int, o: int) -> int:
    """Virtual address built from directory index, table index and offset."""
    return ((d << PDXSHIFT) | (t << PTXSHIFT) | o) & _MASK


def pgroundup(sz: int) -> int:
    return (sz + PGSIZE - 1) & ~(PGSIZE - 1) & _MASK


def pgrounddown(a: int) -> int:
    return a & ~(PGSIZE - 1) & _MASK


def pte_addr(pte: int) -> int:
    """Physical address held in a page-table entry."""
    return pte & ~0xFFF & _MASK


def pte_flags(pte: int) -> int:
    """Flag bits of a page-table entry."""
    return pte & 0xFFF


def v2p(a: int) -> int:
    """Physical address of a kernel virtual address."""
    return (a - KERNBASE) & _MASK


def p2v(a: int) -> int:
    """Kernel virtual address of a physical address."""
    return (a + KERNBASE) & _MASK