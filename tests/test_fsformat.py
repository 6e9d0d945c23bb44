import struct

import pytest

from xv6tools.fsformat import (
    BSIZE,
    DIRENT_SIZE,
    IPB,
    NDIRECT,
    ROOTINO,
    DirEntry,
    DiskInode,
    FileType,
    SuperBlock,
    bblock,
    iblock,
)


def test_superblock_wire_format():
    packed = SuperBlock(1024, 985, 200, 10).pack()
    assert struct.unpack("<4I", packed) == (1024, 985, 200, 10)


def test_superblock_round_trip():
    sb = SuperBlock(1024, 985, 200, 10)
    assert SuperBlock.unpack(sb.pack()) == sb


def test_superblock_unpack_short_data():
    with pytest.raises(ValueError):
        SuperBlock.unpack(b"\0\0\0")


def test_superblock_rejects_negative():
    with pytest.raises(ValueError):
        SuperBlock(-1, 0, 0, 0).pack()


def test_inode_size_divides_block():
    packed = DiskInode().pack()
    assert BSIZE % len(packed) == 0
    assert len(packed) * IPB == BSIZE


def test_inode_round_trip():
    addrs = list(range(100, 100 + NDIRECT + 1))
    inode = DiskInode(type=FileType.FILE, nlink=1, size=700, addrs=addrs)
    back = DiskInode.unpack(inode.pack())
    assert back == inode
    assert back.type == FileType.FILE


def test_inode_requires_all_addresses():
    with pytest.raises(ValueError):
        DiskInode(addrs=[0] * NDIRECT)


def test_inode_unpack_short_data():
    with pytest.raises(ValueError):
        DiskInode.unpack(bytes(10))


def test_dirent_layout():
    packed = DirEntry(ROOTINO, ".").pack()
    assert len(packed) == DIRENT_SIZE
    assert BSIZE % DIRENT_SIZE == 0
    assert packed[:2] == struct.pack("<H", ROOTINO)
    assert packed[2:3] == b"."


def test_dirent_round_trip():
    entry = DirEntry(7, "README")
    assert DirEntry.unpack(entry.pack()) == entry


def test_dirent_truncates_long_name():
    entry = DirEntry.unpack(DirEntry(3, "123456789012345").pack())
    assert entry.name == "12345678901234"
    assert entry.inum == 3


def test_iblock():
    assert iblock(ROOTINO) == 2
    assert iblock(IPB) == iblock(ROOTINO) + 1


def test_bblock():
    assert bblock(0, 200) == 28
    assert bblock(BSIZE * 8, 200) == bblock(0, 200) + 1