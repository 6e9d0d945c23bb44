import pytest

from xv6tools.mmu import (
    DPL_USER,
    EXTMEM,
    KERNBASE,
    KERNLINK,
    PGSIZE,
    SEG_KCODE,
    STA_R,
    STA_W,
    STA_X,
    STS_IG32,
    STS_T32A,
    STS_TG32,
    gate,
    pdx,
    pgaddr,
    pgroundup,
    pgrounddown,
    p2v,
    pte_addr,
    pte_flags,
    ptx,
    seg,
    seg16,
    v2p,
)


def test_kernel_code_segment_bytes():
    assert seg(STA_X | STA_R, 0, 0xFFFFFFFF, 0).encode() == bytes.fromhex("ffff0000009acf00")


def test_user_data_segment_bytes():
    assert seg(STA_W, 0, 0xFFFFFFFF, DPL_USER).encode() == bytes.fromhex("ffff000000f2cf00")


def test_seg_splits_base():
    d = seg(STA_W, 0x12345678, 8, 0)
    assert (d.base_15_0, d.base_23_16, d.base_31_24) == (0x5678, 0x34, 0x12)
    assert d.g == 1 and d.db == 1 and d.p == 1 and d.s == 1


def test_seg16_keeps_byte_limit():
    d = seg16(STS_T32A, 0x12345678, 0x67, 0)
    assert d.lim_15_0 == 0x67
    assert d.lim_19_16 == 0
    assert d.g == 0
    assert d.type == STS_T32A
    raw = int.from_bytes(d.encode(), "little")
    assert raw & 0xFFFF == 0x67
    assert (raw >> 16) & 0xFFFF == 0x5678


def test_gate_trap_and_interrupt():
    trap = gate(True, SEG_KCODE << 3, 0x80105678, DPL_USER)
    assert trap.type == STS_TG32
    assert trap.dpl == DPL_USER
    assert trap.off_15_0 == 0x5678
    assert trap.off_31_16 == 0x8010
    assert trap.cs == SEG_KCODE << 3
    assert gate(False, SEG_KCODE << 3, 0, 0).type == STS_IG32


def test_gate_encoding_layout():
    g = gate(False, SEG_KCODE << 3, 0x80105678, 0)
    raw = int.from_bytes(g.encode(), "little")
    assert len(g.encode()) == 8
    assert raw & 0xFFFF == 0x5678
    assert (raw >> 16) & 0xFFFF == SEG_KCODE << 3
    assert (raw >> 40) & 0xF == STS_IG32
    assert (raw >> 47) & 1 == 1
    assert raw >> 48 == 0x8010


@pytest.mark.parametrize("va", [0, 0x1234, KERNBASE, KERNLINK + 0x2ABC, 0xFFFFFFFF])
def test_pgaddr_round_trip(va):
    assert pgaddr(pdx(va), ptx(va), va & 0xFFF) == va


@pytest.mark.parametrize("x", [0, 1, PGSIZE - 1, PGSIZE, PGSIZE + 1, 123456])
def test_rounding(x):
    down = pgrounddown(x)
    up = pgroundup(x)
    assert down % PGSIZE == 0 and up % PGSIZE == 0
    assert down <= x <= up
    assert up - down in (0, PGSIZE)


def test_rounding_of_page_boundary():
    assert pgroundup(PGSIZE) == PGSIZE
    assert pgroundup(1) == PGSIZE
    assert pgrounddown(PGSIZE - 1) == 0


@pytest.mark.parametrize("pte", [0, 0x7, 0x12345007, 0xFFFFFFFF])
def test_pte_split(pte):
    assert pte_addr(pte) | pte_flags(pte) == pte
    assert pte_addr(pte) & pte_flags(pte) == 0


def test_virtual_physical_conversion():
    assert p2v(0) == KERNBASE
    assert v2p(KERNLINK) == EXTMEM
    for a in (0, EXTMEM, 0x1234000):
        assert v2p(p2v(a)) == a