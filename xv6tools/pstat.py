"""Process table snapshots and the reports of the scheduler tests."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from xv6tools.fsformat import NPROC


def _slots() -> list[int]:
    return [0] * NPROC


@dataclass
class ProcessTable:
    """Per-slot usage, tickets, pid and accumulated ticks of every process."""

    inuse: list[int] = field(default_factory=_slots)
    tickets: list[int] = field(default_factory=_slots)
    pid: list[int] = field(default_factory=_slots)
    ticks: list[int] = field(default_factory=_slots)

    def __post_init__(self) -> None:
        for name in ("inuse", "tickets", "pid", "ticks"):
            if len(getattr(self, name)) != NPROC:
                raise ValueError(f"{name} must hold {NPROC} entries")

    def find_pid(self, pid: int) -> int | None:
        """Slot of the first process with ``pid``, or None."""
        return next((i for i, p in enumerate(self.pid) if p == pid), None)

    def status_line(self, index: int) -> str:
        """Pid, ticks and whether the slot is in use, tab-separated."""
        state = "YES" if self.inuse[index] == 1 else "NO"
        return f"{self.pid[index]}\t{self.ticks[index]}\t{state}"


def lottery_report(
    table: ProcessTable, children: Sequence[int], tickets: Sequence[int]
) -> str:
    """Share of CPU ticks each child received, against the tickets it held."""
    if len(children) != len(tickets):
        raise ValueError("children and tickets differ in length")
    ticks = []
    for child in children:
        index = table.find_pid(child)
        if index is None:
            raise LookupError("Failed to get process info")
        ticks.append(table.ticks[index])
    total = sum(ticks)
    if total < 1000:
        raise ValueError(f"{total} ticks are too few to report shares")

    lines = [f"(real {total})\n\n"]
    for child, held, got in zip(children, tickets, ticks):
        whole = got // (total // 100)
        tenth = got // (total // 1000) % 10
        lines.append(
            f"PID: {child}\tTICKETS: {held}\tTICKS: {got}\tCPU: {whole}.{tenth}%\n"
        )
    lines.append("\n")
    return "".join(lines)