"""Build a file system image holding a root directory and a set of files."""

from __future__ import annotations

import struct
import sys
from collections.abc import Iterable
from pathlib import Path

from xv6tools.fsformat import (
    BPB,
    BSIZE,
    DINODE_SIZE,
    IPB,
    LOGSIZE,
    MAXFILE,
    NDIRECT,
    NINDIRECT,
    ROOTINO,
    DirEntry,
    DiskInode,
    FileType,
    SuperBlock,
    bblock,
    iblock,
)

_INDIRECT = struct.Struct(f"<{NINDIRECT}I")


class FsImageBuilder:
    """An in-memory file system image that files are appended to."""

    def __init__(
        self,
        *,
        size: int = 1024,
        nblocks: int = 985,
        ninodes: int = 200,
        nlog: int = LOGSIZE,
    ) -> None:
        self.size = size
        self.nblocks = nblocks
        self.ninodes = ninodes
        self.nlog = nlog
        self.bitmap_blocks = size // BPB + 1
        self.used_blocks = ninodes // IPB + 3 + self.bitmap_blocks
        if nblocks + self.used_blocks + nlog != size:
            raise ValueError(
                f"{nblocks} data + {self.used_blocks} metadata + {nlog} log "
                f"blocks do not add up to {size}"
            )
        self.metadata_blocks = self.used_blocks
        self.free_block = self.used_blocks
        self.bitmap_sector = bblock(0, ninodes)
        self._next_inode = 1
        self._finished = False
        self._image = bytearray(size * BSIZE)

        self.superblock = SuperBlock(size, nblocks, ninodes, nlog)
        self.write_sector(1, self.superblock.pack())

        self.root = self.alloc_inode(FileType.DIR)
        if self.root != ROOTINO:
            raise RuntimeError("root directory did not get the root inode number")
        for name in (".", ".."):
            self.append(self.root, DirEntry(self.root, name).pack())

    def _check_sector(self, sector: int) -> None:
        if not 0 <= sector < self.size:
            raise ValueError(f"sector {sector} lies outside the image")

    def read_sector(self, sector: int) -> bytes:
        self._check_sector(sector)
        start = sector * BSIZE
        return bytes(self._image[start : start + BSIZE])

    def write_sector(self, sector: int, data: bytes) -> None:
        """Write one sector; shorter data is padded with zeroes."""
        self._check_sector(sector)
        if len(data) > BSIZE:
            raise ValueError(f"a sector holds {BSIZE} bytes, got {len(data)}")
        start = sector * BSIZE
        self._image[start : start + BSIZE] = bytes(data).ljust(BSIZE, b"\0")

    def read_inode(self, inum: int) -> DiskInode:
        offset = (inum % IPB) * DINODE_SIZE
        sector = self.read_sector(iblock(inum))
        return DiskInode.unpack(sector[offset : offset + DINODE_SIZE])

    def write_inode(self, inum: int, inode: DiskInode) -> None:
        block = iblock(inum)
        offset = (inum % IPB) * DINODE_SIZE
        sector = bytearray(self.read_sector(block))
        sector[offset : offset + DINODE_SIZE] = inode.pack()
        self.write_sector(block, sector)

    def alloc_inode(self, type: int) -> int:
        inum = self._next_inode
        self._next_inode += 1
        self.write_inode(inum, DiskInode(type=int(type), nlink=1))
        return inum

    def _alloc_block(self) -> int:
        block = self.free_block
        self.free_block += 1
        self.used_blocks += 1
        return block

    def _block_for(self, inode: DiskInode, fbn: int) -> int:
        if fbn < NDIRECT:
            if inode.addrs[fbn] == 0:
                inode.addrs[fbn] = self._alloc_block()
            return inode.addrs[fbn]
        if inode.addrs[NDIRECT] == 0:
            inode.addrs[NDIRECT] = self._alloc_block()
        table_sector = inode.addrs[NDIRECT]
        table = list(_INDIRECT.unpack(self.read_sector(table_sector)))
        slot = fbn - NDIRECT
        if table[slot] == 0:
            table[slot] = self._alloc_block()
            self.write_sector(table_sector, _INDIRECT.pack(*table))
        return table[slot]

    def append(self, inum: int, data: bytes) -> None:
        """Append bytes to the file of inode ``inum``, allocating blocks."""
        inode = self.read_inode(inum)
        offset = inode.size
        data = bytes(data)
        pos = 0
        while pos < len(data):
            fbn = offset // BSIZE
            if fbn >= MAXFILE:
                raise ValueError(f"file of inode {inum} exceeds {MAXFILE} blocks")
            block = self._block_for(inode, fbn)
            n = min(len(data) - pos, (fbn + 1) * BSIZE - offset)
            start = offset - fbn * BSIZE
            sector = bytearray(self.read_sector(block))
            sector[start : start + n] = data[pos : pos + n]
            self.write_sector(block, sector)
            pos += n
            offset += n
        inode.size = offset
        self.write_inode(inum, inode)

    def add_file(self, name: str, data: bytes) -> int:
        """Add a regular file to the root directory and return its inode number."""
        if self._finished:
            raise RuntimeError("image is already finished")
        if name.startswith("fs/"):
            name = name[3:]
        if "/" in name:
            raise ValueError(f"file name {name!r} must not contain '/'")
        inum = self.alloc_inode(FileType.FILE)
        self.append(self.root, DirEntry(inum, name).pack())
        self.append(inum, data)
        return inum

    def finish(self) -> None:
        """Round up the root directory size and write the block bitmap."""
        if self._finished:
            raise RuntimeError("image is already finished")
        root = self.read_inode(self.root)
        root.size = (root.size // BSIZE + 1) * BSIZE
        self.write_inode(self.root, root)

        used = self.used_blocks
        if used >= BPB:
            raise ValueError(f"{used} used blocks do not fit in one bitmap block")
        bitmap = bytearray(BSIZE)
        for block in range(used):
            bitmap[block // 8] |= 1 << (block % 8)
        self.write_sector(self.bitmap_sector, bitmap)
        self._finished = True

    def image(self) -> bytes:
        return bytes(self._image)


def build_image(path: str | Path, files: Iterable[tuple[str, bytes]]) -> FsImageBuilder:
    """Build an image from (name, data) pairs and write it to ``path``."""
    builder = FsImageBuilder()
    for name, data in files:
        builder.add_file(name, data)
    builder.finish()
    Path(path).write_bytes(builder.image())
    return builder


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Usage: mkfs fs.img files...", file=sys.stderr)
        return 1
    output, inputs = args[0], args[1:]

    builder = FsImageBuilder()
    print(
        f"used {builder.metadata_blocks} (bit {builder.bitmap_blocks} "
        f"ninode {builder.ninodes // IPB + 1}) free {builder.metadata_blocks} "
        f"log {builder.nlog} "
        f"total {builder.nblocks + builder.metadata_blocks + builder.nlog}"
    )

    for path in inputs:
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            print(f"{path}: {exc.strerror}", file=sys.stderr)
            return 1
        try:
            builder.add_file(path, data)
        except ValueError as exc:
            print(f"mkfs: {exc}", file=sys.stderr)
            return 1

    try:
        builder.finish()
    except ValueError as exc:
        print(f"mkfs: {exc}", file=sys.stderr)
        return 1
    print(f"balloc: first {builder.used_blocks} blocks have been allocated")
    print(f"balloc: write bitmap block at sector {builder.bitmap_sector}")

    try:
        Path(output).write_bytes(builder.image())
    except OSError as exc:
        print(f"{output}: {exc.strerror}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())