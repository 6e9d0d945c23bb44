# xv6tools

Python tools and models for a small teaching Unix system: its on-disk
file system format, an image builder, a handful of user-level utilities,
the shell's command parser, and a model of its two-level page tables.
The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Command-line tools

### xv6-mkfs

Builds a file system image of 1024 blocks of 512 bytes (985 data blocks,
200 inodes, 10 log blocks). Every input file becomes a regular file in the
root directory; a leading `fs/` is stripped from its name, any other `/`
in the name is an error, and names are cut to 14 bytes.

```
xv6-mkfs fs.img README fs/cat fs/echo
```

It prints the block counts of the layout and of the block bitmap it
writes, and exits with status 1 on a usage error or when a file cannot be
read or does not fit.

### xv6-grep

Prints the lines of the named files, or of standard input, that match a
pattern. Patterns understand `^`, `.`, `*` and `$` only. Input goes
through a 1024-character buffer: a last line without a newline, or a
buffer's worth of text without one, is dropped.

```
xv6-grep '^ab*c$' notes.txt
```

## Modules

- `xv6tools.fsformat` – the on-disk layout: `SuperBlock`, `DiskInode` and
  `DirEntry` (each with `pack()` and `unpack()`), the `FileType` and
  `OpenFlag` enums, the size limits (`BSIZE`, `NDIRECT`, `MAXFILE`,
  `DIRSIZ`, `NPROC`, ...) and `iblock()` / `bblock()` to find the block
  holding an inode or a bitmap bit.
- `xv6tools.mkfs` – `FsImageBuilder` keeps an image in memory
  (`read_sector`, `write_sector`, `read_inode`, `write_inode`,
  `alloc_inode`, `append`, `add_file`, `finish`, `image`);
  `build_image(path, files)` builds one from `(name, data)` pairs and
  writes it out; `main()` is the `xv6-mkfs` command.
- `xv6tools.printf` – `format(fmt, *args)` and `fprintf(stream, fmt,
  *args)`, understanding `%d`, `%x`, `%p` (upper-case hex), `%s` (`None`
  prints `(null)`), `%c` and `%%`; other conversions are printed as they
  stand. Integers are treated as 32-bit.
- `xv6tools.ulib` – `atoi(s)` (leading decimal digits), `strcmp(p, q)`
  (byte difference, stopping at NUL) and `gets(stream, max)`.
- `xv6tools.umalloc` – `Heap(start=4096, limit=None)`, a first-fit
  allocator with a circular free list that hands out addresses:
  `malloc(nbytes)` returns an address or `None` when `limit` is reached,
  `free(ptr)` coalesces neighbours (and raises `ValueError` for an
  address it did not hand out), `free_blocks()` lists the free list.
- `xv6tools.mmu` – 32-bit x86 definitions: `SegmentDescriptor` and
  `GateDescriptor` with `encode()`, the builders `seg`, `seg16`, `gate`,
  the paging helpers `pdx`, `ptx`, `pgaddr`, `pgroundup`, `pgrounddown`,
  `pte_addr`, `pte_flags`, the address converters `v2p` / `p2v`, and the
  memory-layout and flag constants.
- `xv6tools.vm` – `PhysicalMemory(start, npages)` with `kalloc`, `kfree`,
  `read`, `write`; `AddressSpace(memory, kmap=())` with `walk`,
  `map_pages`, `init_code`, `load`, `alloc`, `dealloc`, `free`,
  `clear_user`, `copy`, `user_to_kernel`, `copy_out`. Broken kernel
  invariants raise `KernelPanic`; running out of pages raises
  `MemoryError`.
- `xv6tools.grep` – `match(re, text)`, `grep(pattern, stream, out)` and
  `main()`, the `xv6-grep` command.
- `xv6tools.shell` – `tokenize(line)` and `parse_command(line)`, which
  builds a tree of `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and
  `BackCmd`. Bad input raises `ShellSyntaxError`, whose `leftovers`
  holds any unparsed tail. At most nine arguments per command are
  accepted.
- `xv6tools.textutils` – `word_count(data)` returns `(lines, words,
  bytes)`, `wc_line(data, name)` formats them, `cat(streams, out)`
  copies streams, `echo(args)` joins arguments, `fmtname(path)` pads the
  last path component to 14 characters.
- `xv6tools.pstat` – `ProcessTable` (per-slot `inuse`, `tickets`, `pid`,
  `ticks`) with `find_pid` and `status_line`, and `lottery_report(table,
  children, tickets)`, which reports each child's share of ticks.

## Examples

```python
from xv6tools.printf import format
from xv6tools.grep import match
from xv6tools.shell import parse_command
from xv6tools.textutils import word_count

format("%d items at %x", 3, 255)        # '3 items at FF'
match("^a.c$", "abc")                   # True
cmd = parse_command("cat < in | wc > out")
word_count(b"hello world\n")            # (1, 2, 12)
```

## What the package does not do

It runs no kernel and starts no processes. The shell module only parses
command lines; it does not execute them. The page-table model works on
simulated memory and never touches real hardware, and there is no
scheduler: `xv6tools.pstat` only reads and reports the statistics it is
given. `xv6-mkfs` writes regular files into the root directory only; it
creates no subdirectories or device files.