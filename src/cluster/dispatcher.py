"""Concurrent dispatch of partitions to workers.

Each partition goes to the worker configured for its slot. All exchanges run
as concurrent asyncio tasks and their results are merged into a shared
ScoreAccumulator. A failed exchange is logged and contributes nothing; it
never fails the batch.
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional, Sequence

from src.cluster.config import DEFAULT_MAX_LINE_BYTES, DEFAULT_MAX_RETRIES
from src.cluster.exceptions import (
    ClusterRecException,
    InvalidArgumentError,
    WorkerConnectionError,
)
from src.cluster.models import DispatchReport, PredictedResult, UserItemMatrix
from src.cluster.prober import parse_address
from src.cluster.protocol import (
    close_writer,
    decode_results,
    encode_partition,
    read_frame,
    write_frame,
)

# Configure module logger
logger = logging.getLogger(__name__)


class ScoreAccumulator:
    """Shared product_id -> contributed scores mapping.

    Writers append under a single lock, held only for the append. The
    mapping is meant to be read after every writer has finished.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._scores: Dict[str, List[float]] = {}

    async def add(self, results: Sequence[PredictedResult]) -> None:
        """Append every result's score to its product's list."""
        async with self._lock:
            for result in results:
                self._scores.setdefault(result.product_id, []).append(result.stars)

    @property
    def scores(self) -> Dict[str, List[float]]:
        """Current contents of the accumulator."""
        return self._scores

    def __len__(self) -> int:
        return len(self._scores)


async def exchange_with_worker(
    address: str,
    partition: UserItemMatrix,
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
) -> List[PredictedResult]:
    """Send one partition to a worker and wait for its predicted results.

    Args:
        address: Worker address as "host:port".
        partition: Partition to score.
        max_line_bytes: Largest response frame accepted.

    Returns:
        The worker's predicted results.

    Raises:
        WorkerConnectionError: If the connection cannot be opened.
        TransportError: If writing the request or reading the response fails.
        DecodeError: If the response is not a list of predicted results.
    """
    try:
        host, port = parse_address(address)
        reader, writer = await asyncio.open_connection(host, port, limit=max_line_bytes)
    except (OSError, ValueError) as e:
        raise WorkerConnectionError(address, e) from e

    try:
        await write_frame(writer, encode_partition(partition), address)
        frame = await read_frame(reader, address)
        return decode_results(frame, address)
    finally:
        await close_writer(writer)


async def _dispatch_one(
    address: str,
    partition: UserItemMatrix,
    accumulator: ScoreAccumulator,
    exchange_timeout: Optional[float],
    max_retries: int,
    max_line_bytes: int,
) -> bool:
    attempts = max_retries + 1
    for attempt in range(1, attempts + 1):
        start_time = time.time()
        try:
            exchange = exchange_with_worker(address, partition, max_line_bytes)
            if exchange_timeout is None:
                results = await exchange
            else:
                results = await asyncio.wait_for(exchange, timeout=exchange_timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Worker exchange timed out",
                extra={
                    "address": address,
                    "attempt": attempt,
                    "timeout_s": exchange_timeout,
                },
            )
            continue
        except ClusterRecException as e:
            logger.error(
                "Worker exchange failed",
                extra={
                    "address": address,
                    "attempt": attempt,
                    "error": e.message,
                    "error_type": type(e).__name__,
                },
            )
            continue

        await accumulator.add(results)
        logger.info(
            f"Received {len(results)} results from {address}",
            extra={
                "address": address,
                "num_users": len(partition),
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        return True

    return False


async def dispatch_partitions(
    workers: Sequence[str],
    available: Sequence[str],
    partitions: Sequence[UserItemMatrix],
    accumulator: ScoreAccumulator,
    exchange_timeout: Optional[float] = None,
    max_retries: int = DEFAULT_MAX_RETRIES,
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
) -> DispatchReport:
    """Send each partition to its worker and merge the responses.

    Partition i targets workers[i]. Partitions whose worker is not in
    ``available`` are skipped; their users are left out of this cycle.
    The call returns once every dispatched exchange has succeeded or failed.
    Without ``exchange_timeout`` a worker that never answers stalls the
    whole batch.

    Args:
        workers: Configured worker addresses, one per partition slot.
        available: Addresses that answered the availability probe.
        partitions: One partition per configured worker.
        accumulator: Shared score accumulator receiving the results.
        exchange_timeout: Optional deadline in seconds for each exchange.
        max_retries: Extra attempts for a failed exchange with the same worker.
        max_line_bytes: Largest response frame accepted.

    Returns:
        DispatchReport counting dispatched, succeeded and failed partitions.

    Raises:
        InvalidArgumentError: If the number of partitions differs from the
            number of configured workers, or max_retries is negative.
    """
    if len(partitions) != len(workers):
        raise InvalidArgumentError(
            "partitions",
            len(partitions),
            f"expected one partition per configured worker ({len(workers)})",
        )
    if max_retries < 0:
        raise InvalidArgumentError("max_retries", max_retries, "must not be negative")

    available_set = set(available)
    report = DispatchReport(
        partitions_total=len(partitions),
        workers_available=len(available_set & set(workers)),
    )

    targets = []
    for address, partition in zip(workers, partitions):
        if address not in available_set:
            logger.warning(
                "Skipping partition for unavailable worker",
                extra={"address": address, "num_users": len(partition)},
            )
            report.skipped_workers.append(address)
            continue
        targets.append((address, partition))

    report.dispatched = len(targets)
    outcomes = await asyncio.gather(
        *(
            _dispatch_one(
                address,
                partition,
                accumulator,
                exchange_timeout,
                max_retries,
                max_line_bytes,
            )
            for address, partition in targets
        )
    )

    for (address, _), succeeded in zip(targets, outcomes):
        if succeeded:
            report.succeeded += 1
        else:
            report.failed_workers.append(address)

    logger.info(
        "Dispatch completed",
        extra={
            "partitions_total": report.partitions_total,
            "dispatched": report.dispatched,
            "succeeded": report.succeeded,
            "failed_workers": report.failed_workers,
        },
    )
    return report
