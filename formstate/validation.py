"""Validation engine for formstate fields.

A validation run over a field works in two phases:

1. Synchronous validators run in declared order. The first one that returns
   a message decides the field's error and stops the run. Validators that
   return an awaitable are set aside instead of awaited inline.
2. If nothing failed synchronously and some validators were set aside, the
   field is marked ``validating`` and all of them race on the running asyncio
   loop. The first one to finish with a message wins.

Every run takes a new value of the field's validation counter when it starts.
A run that finishes after a newer run has started is stale: its result is
discarded and neither ``error`` nor ``validating`` is written. Stale
computations are not cancelled, they run to completion and are ignored.
"""

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Generator, List

from formstate.errors import NoEventLoopError
from formstate.types import ValidationError

if TYPE_CHECKING:
    from formstate.field import FormField

logger = logging.getLogger(__name__)


class Settled:
    """Awaitable returned by a validation run that finished synchronously.

    Lets callers ``await field.validate()`` whether or not the run had
    asynchronous work, without requiring an event loop.
    """

    __slots__ = ()

    def __await__(self) -> Generator[Any, None, None]:
        return
        yield  # pragma: no cover

    def done(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "<Settled>"


SETTLED = Settled()


def _retrieve(future: "asyncio.Future[Any]") -> None:
    # Losing validators may still fail after the race is decided.
    if not future.cancelled():
        future.exception()


def _discard(pending: List[Awaitable[ValidationError]]) -> None:
    for awaitable in pending:
        if inspect.iscoroutine(awaitable):
            awaitable.close()


async def first_error(futures: List["asyncio.Future[ValidationError]"]) -> ValidationError:
    """Return the first truthy result among ``futures`` by completion order.

    Returns ``None`` when every future completes with a falsy result. The
    first exception raised by a future propagates. Futures still running
    when the result is known are left alone.
    """
    for next_done in asyncio.as_completed(futures):
        error = await next_done
        if error:
            return error
    return None


async def _settle(
    node: "FormField",
    counter: int,
    futures: List["asyncio.Future[ValidationError]"],
) -> None:
    def is_stale() -> bool:
        return node._validation_counter != counter

    try:
        error = await first_error(futures)
    except asyncio.CancelledError:
        if not is_stale():
            node._set_validating(False)
        raise
    except Exception:
        if is_stale():
            logger.debug("%s: ignoring failure of a stale validation run", node.debug_name)
            return
        node._set_validating(False)
        raise

    if is_stale():
        logger.debug("%s: discarding stale validation result", node.debug_name)
        return

    node._set_validating(False)
    node._set_error(error)


def run_validation(node: "FormField") -> Awaitable[None]:
    """Validate ``node`` and return an awaitable for the run's completion.

    Synchronous results are committed before this function returns. When
    asynchronous validators are involved the returned task commits their
    result, unless a newer run has started in the meantime.

    Raises:
        NoEventLoopError: If asynchronous validators are used outside a
            running event loop
    """
    node._validation_counter += 1
    counter = node._validation_counter

    if node.disabled:
        node._set_validating(False)
        node._set_error(None)
        return SETTLED

    pending: List[Awaitable[ValidationError]] = []

    try:
        for validator in list(node.validators):
            result = validator(node)
            if inspect.isawaitable(result):
                pending.append(result)
            elif result:
                _discard(pending)
                node._set_validating(False)
                node._set_error(result)
                return SETTLED
    except BaseException:
        # Earlier pending runs are stale now and never clear the flag.
        _discard(pending)
        node._set_validating(False)
        raise

    if not pending:
        node._set_validating(False)
        node._set_error(None)
        return SETTLED

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        _discard(pending)
        raise NoEventLoopError(node.debug_name) from None

    futures = [asyncio.ensure_future(awaitable, loop=loop) for awaitable in pending]
    for future in futures:
        future.add_done_callback(_retrieve)

    node._set_validating(True)
    return loop.create_task(_settle(node, counter, futures))


__all__ = [
    "SETTLED",
    "Settled",
    "first_error",
    "run_validation",
]
