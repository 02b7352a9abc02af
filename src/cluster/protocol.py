"""Wire protocol between the master and the workers.

Every message is a single JSON document terminated by a newline. JSON
string escaping keeps newlines inside identifiers out of the frame, so a
line always holds exactly one message. There is no version field,
authentication or compression.

    master -> worker:  {"<reviewer_id>": {"<product_id>": <stars>, ...}, ...}
    worker -> master:  [{"product_id": ..., "stars": ..., "category": ...}, ...]
"""

import asyncio
import json
import logging
from typing import Any, List

from pydantic import TypeAdapter, ValidationError

from src.cluster.exceptions import DecodeError, TransportError
from src.cluster.models import PredictedResult, UserItemMatrix

# Configure module logger
logger = logging.getLogger(__name__)

FRAME_DELIMITER = b"\n"

_PARTITION_ADAPTER = TypeAdapter(UserItemMatrix)
_RESULTS_ADAPTER = TypeAdapter(List[PredictedResult])


def encode_frame(payload: Any) -> bytes:
    """Serialize a JSON-compatible payload into one newline-terminated frame."""
    return json.dumps(payload, separators=(",", ":")).encode("utf-8") + FRAME_DELIMITER


def encode_partition(partition: UserItemMatrix) -> bytes:
    """Frame a partition for sending to a worker."""
    return encode_frame(partition)


def encode_results(results: List[PredictedResult]) -> bytes:
    """Frame a worker's predicted results."""
    return _RESULTS_ADAPTER.dump_json(results) + FRAME_DELIMITER


async def read_frame(reader: asyncio.StreamReader, peer: str) -> bytes:
    """Read exactly one frame from a stream.

    Args:
        reader: Stream to read from.
        peer: Address of the other side, used in error reports.

    Returns:
        The frame content without its trailing newline.

    Raises:
        TransportError: If the stream fails, ends before a complete frame
            arrives, or the frame exceeds the reader's limit.
    """
    try:
        line = await reader.readuntil(FRAME_DELIMITER)
    except (asyncio.IncompleteReadError, asyncio.LimitOverrunError, OSError) as e:
        raise TransportError(peer, "read", e) from e
    return line.rstrip(b"\r\n")


async def write_frame(writer: asyncio.StreamWriter, frame: bytes, peer: str) -> None:
    """Write one frame and wait until it is flushed."""
    try:
        writer.write(frame)
        await writer.drain()
    except OSError as e:
        raise TransportError(peer, "write", e) from e


def decode_partition(frame: bytes, peer: str) -> UserItemMatrix:
    """Decode a partition frame.

    Raises:
        DecodeError: If the frame is not a user -> item -> rating mapping.
    """
    try:
        return _PARTITION_ADAPTER.validate_json(frame)
    except ValidationError as e:
        raise DecodeError(peer, e) from e


def decode_results(frame: bytes, peer: str) -> List[PredictedResult]:
    """Decode a worker's response frame.

    Raises:
        DecodeError: If the frame is not a list of predicted results.
    """
    try:
        return _RESULTS_ADAPTER.validate_json(frame)
    except ValidationError as e:
        raise DecodeError(peer, e) from e


async def close_writer(writer: asyncio.StreamWriter) -> None:
    """Close a stream, ignoring errors from an already broken connection."""
    writer.close()
    try:
        await writer.wait_closed()
    except OSError as e:
        logger.debug(f"Error while closing connection: {e}")
