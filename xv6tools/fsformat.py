"""On-disk file system layout: superblock, inodes, directory entries and limits."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field

# File system geometry.
ROOTINO = 1
BSIZE = 512
NDIRECT = 12
NINDIRECT = BSIZE // 4
MAXFILE = NDIRECT + NINDIRECT
DIRSIZ = 14

# System-wide limits.
NPROC = 64
KSTACKSIZE = 4096
NCPU = 8
NOFILE = 16
NFILE = 100
NBUF = 10
NINODE = 50
NDEV = 10
ROOTDEV = 1
MAXARG = 32
LOGSIZE = 10


class FileType(enum.IntEnum):
    """Kind of object an inode describes."""

    DIR = 1
    FILE = 2
    DEV = 3


class OpenFlag(enum.IntFlag):
    """Flags accepted when opening a file."""

    RDONLY = 0x000
    WRONLY = 0x001
    RDWR = 0x002
    CREATE = 0x200


_SUPERBLOCK = struct.Struct("<4I")
_DINODE = struct.Struct(f"<4hI{NDIRECT + 1}I")
_DIRENT = struct.Struct(f"<H{DIRSIZ}s")

SUPERBLOCK_SIZE = _SUPERBLOCK.size
DINODE_SIZE = _DINODE.size
DIRENT_SIZE = _DIRENT.size

# Inodes per block.
IPB = BSIZE // DINODE_SIZE
# Bitmap bits per block.
BPB = BSIZE * 8


def _require(data: bytes, layout: struct.Struct, what: str) -> None:
    if len(data) < layout.size:
        raise ValueError(f"{what} needs {layout.size} bytes, got {len(data)}")


def _pack(layout: struct.Struct, *values: object) -> bytes:
    try:
        return layout.pack(*values)
    except struct.error as exc:
        raise ValueError(str(exc)) from exc


@dataclass
class SuperBlock:
    """Describes the sizes of the regions of a file system image."""

    size: int
    nblocks: int
    ninodes: int
    nlog: int

    def pack(self) -> bytes:
        return _pack(_SUPERBLOCK, self.size, self.nblocks, self.ninodes, self.nlog)

    @classmethod
    def unpack(cls, data: bytes) -> SuperBlock:
        _require(data, _SUPERBLOCK, "superblock")
        return cls(*_SUPERBLOCK.unpack_from(data))


@dataclass
class DiskInode:
    """An inode as stored on disk."""

    type: int = 0
    major: int = 0
    minor: int = 0
    nlink: int = 0
    size: int = 0
    addrs: list[int] = field(default_factory=lambda: [0] * (NDIRECT + 1))

    def __post_init__(self) -> None:
        if len(self.addrs) != NDIRECT + 1:
            raise ValueError(f"an inode holds exactly {NDIRECT + 1} block addresses")

    def pack(self) -> bytes:
        return _pack(
            _DINODE,
            self.type,
            self.major,
            self.minor,
            self.nlink,
            self.size,
            *self.addrs,
        )

    @classmethod
    def unpack(cls, data: bytes) -> DiskInode:
        _require(data, _DINODE, "inode")
        type_, major, minor, nlink, size, *addrs = _DINODE.unpack_from(data)
        return cls(type_, major, minor, nlink, size, list(addrs))


@dataclass
class DirEntry:
    """One directory entry; names longer than DIRSIZ bytes are truncated."""

    inum: int
    name: str

    def pack(self) -> bytes:
        return _pack(_DIRENT, self.inum, self.name.encode("utf-8", "surrogateescape"))

    @classmethod
    def unpack(cls, data: bytes) -> DirEntry:
        _require(data, _DIRENT, "directory entry")
        inum, raw = _DIRENT.unpack_from(data)
        name = raw.split(b"\0", 1)[0].decode("utf-8", "surrogateescape")
        return cls(inum, name)


def iblock(inum: int) -> int:
    """Block that holds inode ``inum``."""
    return inum // IPB + 2


def bblock(block: int, ninodes: int) -> int:
    """Bitmap block that holds the bit for ``block``."""
    return block // BPB + ninodes // IPB + 3