"""Thread synchronisation demonstrations.

Covers producers and consumers guarded by a mutex, a condition variable or
semaphores, ticket selling with and without a lock, a readers-writer lock,
and two threads that deadlock by taking two locks in opposite order.
"""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import NamedTuple

PAUSE = 0.0001
RW_PAUSE = 0.0005
MAX_VALUE = 1000


@dataclass
class ProductionResult:
    """What a producer/consumer run produced and consumed."""

    produced: list[int] = field(default_factory=list)
    consumed: list[int] = field(default_factory=list)
    max_depth: int = 0


class Sale(NamedTuple):
    """One ticket sold by one window."""

    window: int
    ticket: int


@dataclass
class RWResult:
    """Final counter value and the values each reader saw, in order."""

    final: int
    reads: list[list[int]]


class RWLock:
    """A readers-writer lock: many readers at once, or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._readers = 0
        self._writer = False

    def acquire_read(self) -> None:
        """Block until no writer holds the lock, then take a read share."""
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        """Give back a read share."""
        with self._cond:
            if self._readers == 0:
                raise RuntimeError("release_read without a read lock held")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        """Block until nobody holds the lock, then take it exclusively."""
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True

    def release_write(self) -> None:
        """Give back the exclusive hold."""
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write without the write lock held")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def reading(self) -> Iterator[None]:
        """Hold a read share for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def writing(self) -> Iterator[None]:
        """Hold the write lock for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


def _check_counts(producers: int, consumers: int, items: int) -> int:
    if producers < 0 or consumers < 0 or items < 0:
        raise ValueError("producers, consumers and items must not be negative")
    total = producers * items
    if total and consumers == 0:
        raise ValueError("at least one consumer is needed to drain the items")
    return total


def _run_threads(targets: list[Callable[[], None]]) -> None:
    threads = [threading.Thread(target=target, daemon=True) for target in targets]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()


def _report_add(num: int) -> None:
    print(f"add num: {num} from tid: {threading.get_ident()} ")


def _report_del(num: int) -> None:
    print(f"del num: {num} from tid {threading.get_ident()}")


def run_mutex(producers: int = 5, consumers: int = 5, items: int = 20) -> ProductionResult:
    """Producers push onto a shared stack, consumers pop; one mutex guards it.

    Consumers that find the stack empty sleep briefly and try again.
    Each producer makes ``items`` random numbers below 1000.
    """
    total = _check_counts(producers, consumers, items)
    result = ProductionResult()
    stack: list[int] = []
    lock = threading.Lock()

    def produce() -> None:
        for _ in range(items):
            with lock:
                num = random.randrange(MAX_VALUE)
                stack.append(num)
                result.produced.append(num)
                result.max_depth = max(result.max_depth, len(stack))
                _report_add(num)
            time.sleep(PAUSE)

    def consume() -> None:
        while True:
            with lock:
                if len(result.consumed) >= total:
                    return
                num = stack.pop() if stack else None
                if num is not None:
                    result.consumed.append(num)
                    _report_del(num)
            time.sleep(PAUSE)

    _run_threads([produce] * producers + [consume] * consumers)
    return result


def run_cond(producers: int = 5, consumers: int = 5, items: int = 20) -> ProductionResult:
    """Like :func:`run_mutex`, but consumers wait on a condition when the stack is empty."""
    total = _check_counts(producers, consumers, items)
    result = ProductionResult()
    stack: list[int] = []
    cond = threading.Condition()

    def produce() -> None:
        for _ in range(items):
            with cond:
                num = random.randrange(MAX_VALUE)
                stack.append(num)
                result.produced.append(num)
                result.max_depth = max(result.max_depth, len(stack))
                _report_add(num)
                cond.notify()
            time.sleep(PAUSE)

    def consume() -> None:
        while True:
            with cond:
                while not stack and len(result.consumed) < total:
                    cond.wait()
                if len(result.consumed) >= total:
                    return
                num = stack.pop()
                result.consumed.append(num)
                _report_del(num)
                if len(result.consumed) >= total:
                    cond.notify_all()
            time.sleep(PAUSE)

    _run_threads([produce] * producers + [consume] * consumers)
    return result


def run_semaphore(
    producers: int = 5, consumers: int = 5, items: int = 20, capacity: int = 8
) -> ProductionResult:
    """Producers and consumers coordinated by two semaphores.

    At most ``capacity`` numbers are ever waiting on the stack.
    """
    if capacity <= 0:
        raise ValueError("capacity must be positive")
    _check_counts(producers, consumers, items)
    result = ProductionResult()
    stack: list[int] = []
    lock = threading.Lock()
    space = threading.Semaphore(capacity)
    filled = threading.Semaphore(0)

    def produce() -> None:
        for _ in range(items):
            space.acquire()
            with lock:
                num = random.randrange(MAX_VALUE)
                stack.append(num)
                result.produced.append(num)
                result.max_depth = max(result.max_depth, len(stack))
                _report_add(num)
            filled.release()

    def consume() -> None:
        while True:
            filled.acquire()
            with lock:
                if not stack:
                    return
                num = stack.pop()
                result.consumed.append(num)
                _report_del(num)
            space.release()

    producer_threads = [threading.Thread(target=produce, daemon=True) for _ in range(producers)]
    consumer_threads = [threading.Thread(target=consume, daemon=True) for _ in range(consumers)]
    for thread in producer_threads + consumer_threads:
        thread.start()
    for thread in producer_threads:
        thread.join()
    for _ in consumer_threads:
        filled.release()
    for thread in consumer_threads:
        thread.join()
    return result


def sell_tickets(total: int = 100, windows: int = 3, locked: bool = True) -> list[Sale]:
    """Sell ``total`` tickets from several windows at once; return the sales in order.

    Without the lock the check and the decrement are not one step, so the
    same ticket may be sold twice when windows race.
    """
    if total < 0:
        raise ValueError("total must not be negative")
    if windows < 1:
        raise ValueError("at least one window is needed")
    remaining = total
    sales: list[Sale] = []
    lock = threading.Lock()

    def sell_locked(window: int) -> None:
        nonlocal remaining
        while True:
            with lock:
                if remaining <= 0:
                    return
                print(f"{threading.get_ident()} is selling {remaining} ticket")
                sales.append(Sale(window, remaining))
                remaining -= 1

    def sell_unlocked(window: int) -> None:
        nonlocal remaining
        while remaining > 0:
            ticket = remaining
            print(f"{threading.get_ident()} is selling {ticket} ticket")
            sales.append(Sale(window, ticket))
            remaining = ticket - 1

    seller = sell_locked if locked else sell_unlocked
    _run_threads([lambda w=w: seller(w) for w in range(windows)])
    return sales


def run_rwlock(writers: int = 3, readers: int = 5, rounds: int = 20) -> RWResult:
    """Writers increment a shared counter under a write lock while readers read it."""
    if writers < 0 or readers < 0 or rounds < 0:
        raise ValueError("writers, readers and rounds must not be negative")
    rwlock = RWLock()
    num = 0
    reads: list[list[int]] = [[] for _ in range(readers)]

    def write() -> None:
        nonlocal num
        for _ in range(rounds):
            with rwlock.writing():
                num += 1
                print(f"write from tid: {threading.get_ident()}, num: {num}")
            time.sleep(RW_PAUSE)

    def read(seen: list[int]) -> None:
        for _ in range(rounds):
            with rwlock.reading():
                value = num
                print(f"read from tid: {threading.get_ident()}, num: {value}")
            seen.append(value)
            time.sleep(RW_PAUSE)

    targets: list[Callable[[], None]] = [write] * writers
    targets += [lambda seen=seen: read(seen) for seen in reads]
    _run_threads(targets)
    return RWResult(num, reads)


def run_deadlock(timeout: float = 1.0) -> bool:
    """Two threads take two locks in opposite order; return True if they deadlocked.

    Each thread gives up its second lock after ``timeout`` seconds so that
    the run ends; a thread that gets both locks prints its name.
    """
    if timeout <= 0:
        raise ValueError("timeout must be positive")
    first = threading.Lock()
    second = threading.Lock()
    both_hold = threading.Barrier(2)
    stuck: list[str] = []

    def work(name: str, outer: threading.Lock, inner: threading.Lock) -> None:
        with outer:
            try:
                both_hold.wait(timeout)
            except threading.BrokenBarrierError:
                pass
            if inner.acquire(timeout=timeout):
                try:
                    print(f"{name}..")
                finally:
                    inner.release()
            else:
                stuck.append(name)

    _run_threads([lambda: work("workA", first, second), lambda: work("workB", second, first)])
    return bool(stuck)