"""Batched fetching of work items under id-count and URL-length limits.

Azure DevOps caps the number of ids per batch details call (500) and
rejects URLs that grow too long. ``fetch_all`` first chunks the id list by
count, then keeps halving any chunk whose URL is still over the length
budget, and finally issues every request concurrently.
"""

import asyncio
import math
from typing import Awaitable, Callable, Iterator, Sequence, TypeVar

from ..models import MissingQueryParamError, UrlTooLongError
from .api_client_core import log_event
from .url_builder import AzureDevOpsUrlBuilder

T = TypeVar("T")
R = TypeVar("R")

IDS_PARAM = "ids"

UrlFactory = Callable[[Sequence[str]], AzureDevOpsUrlBuilder]


def chunk(source: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of ``source`` with at most ``size`` entries."""
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    for start in range(0, len(source), size):
        yield list(source[start:start + size])


def split_oversized(
    builders: list[AzureDevOpsUrlBuilder],
    max_url_length: int,
    url_factory: UrlFactory,
) -> list[AzureDevOpsUrlBuilder]:
    """Halve every over-length builder's ids until all fit ``max_url_length``.

    Builders already within budget keep their position. An over-length
    builder is replaced in place by two builders carrying the first
    ceil(n/2) ids and the rest.

    Raises:
        UrlTooLongError: a builder with a single id is still too long.
        MissingQueryParamError: an over-length builder has no ``ids`` value.
    """
    while any(b.length > max_url_length for b in builders):
        next_builders: list[AzureDevOpsUrlBuilder] = []
        for builder in builders:
            if builder.length <= max_url_length:
                next_builders.append(builder)
                continue

            ids_value = builder.get_query_param(IDS_PARAM)
            if ids_value is None:
                raise MissingQueryParamError(IDS_PARAM, str(builder))

            ids = ids_value.split(",")
            if len(ids) <= 1:
                raise UrlTooLongError(str(builder), max_url_length)

            half = math.ceil(len(ids) / 2)
            next_builders.append(url_factory(ids[:half]))
            next_builders.append(url_factory(ids[half:]))

        builders = next_builders

    return builders


def plan_batches(
    ids: Sequence[int],
    hard_batch_size: int,
    max_url_length: int,
    url_factory: UrlFactory,
) -> list[AzureDevOpsUrlBuilder]:
    """Build the final list of request URLs for ``ids`` without any I/O."""
    if not ids:
        return []

    builders = [
        url_factory([str(i) for i in batch]) for batch in chunk(ids, hard_batch_size)
    ]
    count_batches = len(builders)
    builders = split_oversized(builders, max_url_length, url_factory)

    if len(builders) != count_batches:
        log_event(
            f"Split {count_batches} batch(es) into {len(builders)} to stay under "
            f"{max_url_length} URL characters",
            "BATCH",
        )
    return builders


async def fetch_all(
    ids: Sequence[int],
    hard_batch_size: int,
    max_url_length: int,
    url_factory: UrlFactory,
    request_fn: Callable[[str], Awaitable[list[R]]],
) -> list[R]:
    """Fetch ``ids`` in as many bounded requests as needed.

    Requests run concurrently. The first failure propagates, the requests
    still in flight are cancelled and any results already received are
    discarded. Results are concatenated in the order the requests were
    planned.
    """
    builders = plan_batches(ids, hard_batch_size, max_url_length, url_factory)
    if not builders:
        return []

    log_event(f"Fetching {len(ids)} id(s) in {len(builders)} request(s)", "BATCH")

    tasks = [asyncio.ensure_future(request_fn(str(b))) for b in builders]
    try:
        responses = await asyncio.gather(*tasks)
    except BaseException:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        # Wait for the cancellations so nothing outlives the call.
        await asyncio.gather(*pending, return_exceptions=True)
        raise

    results: list[R] = []
    for items in responses:
        results.extend(items)
    return results
