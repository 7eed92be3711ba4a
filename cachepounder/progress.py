"""Round progress display.

Each pounder round gets one Rich progress task sized to the round's operation
count. Workers advance it from their own threads at every batch boundary;
Rich takes its own lock around task updates. When stdout is not a terminal
the round is announced once through the logger and the callbacks are no-ops,
so batch lines in CI logs are not interleaved with redraws.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator, List, Optional, Tuple

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

if TYPE_CHECKING:
    from logging import Logger

UpdateFunc = Callable[..., None]
SetDescriptionFunc = Callable[[str], None]


def is_interactive_terminal() -> bool:
    return Console().is_terminal


def _round_columns(total: Optional[int]) -> List[ProgressColumn]:
    columns: List[ProgressColumn] = [
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
    ]
    if total is not None:
        columns += [
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("ops"),
            TimeRemainingColumn(),
        ]
    columns.append(TimeElapsedColumn())
    return columns


def _ignore_update(advance: int = 1, completed: Optional[int] = None) -> None:
    return None


def _ignore_description(desc: str) -> None:
    return None


@contextmanager
def progress_context(
    description: str,
    total: Optional[int] = None,
    logger: Optional["Logger"] = None,
    transient: bool = True,
) -> Iterator[Tuple[UpdateFunc, SetDescriptionFunc]]:
    """Show progress for one unit of work, typically a round.

    Args:
        description: Label shown next to the bar, e.g. ``"Round 0 (warmup)"``.
        total: Operations expected in the round. Without it only a spinner
            and the elapsed time are shown.
        logger: Receives a single ``status`` line when not on a terminal.
        transient: Clear the bar once the round finishes.

    Yields:
        ``(update, set_description)``. ``update(advance=n)`` adds completed
        operations and ``update(completed=n)`` sets the absolute count.
    """
    if not is_interactive_terminal():
        if logger is not None:
            logger.status(f"{description}...")
        yield _ignore_update, _ignore_description
        return

    display = Progress(*_round_columns(total), transient=transient)
    task: TaskID = TaskID(0)
    try:
        display.start()
        task = display.add_task(description, total=total)

        def update(advance: int = 1, completed: Optional[int] = None) -> None:
            if completed is None:
                display.update(task, advance=advance)
            else:
                display.update(task, completed=completed)

        def set_description(desc: str) -> None:
            display.update(task, description=desc)

        yield update, set_description
    finally:
        display.stop()


__all__ = [
    "is_interactive_terminal",
    "progress_context",
]
