"""A repeating interval timer that reports each expiry through SIGALRM."""

from __future__ import annotations

import signal
import sys
from collections.abc import Callable, Sequence


def _report(signum: int) -> None:
    print(f"捕捉到了信号的编号是：{signum}")
    print("xxxxxxx")


def start_timer(
    handler: Callable[[int], object] | None = None,
    delay: float = 3.0,
    interval: float = 2.0,
) -> tuple[float, float]:
    """Call ``handler(signum)`` after ``delay`` seconds, then every ``interval``.

    Returns the previous timer setting as (remaining, interval).
    """
    if delay < 0 or interval < 0:
        raise ValueError("delay and interval must not be negative")
    callback = handler if handler is not None else _report
    signal.signal(signal.SIGALRM, lambda signum, frame: callback(signum))
    previous = signal.setitimer(signal.ITIMER_REAL, delay, interval)
    print("定时器开始了...")
    return previous


def stop_timer() -> tuple[float, float]:
    """Disarm the timer, restore the default SIGALRM action and return the old setting."""
    previous = signal.setitimer(signal.ITIMER_REAL, 0)
    signal.signal(signal.SIGALRM, signal.SIG_DFL)
    return previous


def main(argv: Sequence[str] | None = None) -> int:
    """Start the timer and keep it running until a character is read."""
    try:
        start_timer()
    except OSError as exc:
        print(f"setitimer: {exc}", file=sys.stderr)
        return 0
    try:
        sys.stdin.read(1)
    finally:
        stop_timer()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())