"""
Submission-order application of cache round trips

Two cache mutations issued concurrently may get their responses back in
either order. MutationSequencer hands out a ticket when a round trip is
submitted and lets its result be applied only once every earlier ticket has
been released, so the cache always reflects call order.

Usage inside one round trip:

    ticket = sequencer.issue()
    try:
        response = await transport.send(request)
        await sequencer.wait_turn(ticket)
        apply(response)
    finally:
        sequencer.release(ticket)

A ticket released before its turn (failure, cancellation) is skipped when
its turn comes, so it never blocks later tickets.
"""

import asyncio


class MutationSequencer:
    """Single-writer gate applying results in ticket order."""

    def __init__(self):
        self._next_ticket = 0
        self._current = 0
        self._released: set[int] = set()
        self._waiters: dict[int, asyncio.Future[None]] = {}

    def issue(self) -> int:
        ticket = self._next_ticket
        self._next_ticket += 1
        return ticket

    async def wait_turn(self, ticket: int) -> None:
        """Suspend until every ticket issued before `ticket` is released."""
        if ticket == self._current:
            return
        waiter = asyncio.get_running_loop().create_future()
        self._waiters[ticket] = waiter
        try:
            await waiter
        finally:
            self._waiters.pop(ticket, None)

    def release(self, ticket: int) -> None:
        self._released.add(ticket)
        while self._current in self._released:
            self._released.discard(self._current)
            self._current += 1

        waiter = self._waiters.get(self._current)
        if waiter is not None and not waiter.done():
            waiter.set_result(None)
