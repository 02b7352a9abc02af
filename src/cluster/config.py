"""Runtime configuration for the ClusterRec master.

Defaults mirror a three-worker docker-compose deployment and can be
overridden through environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)

# Default configuration constants
DEFAULT_WORKERS = ["client1:9001", "client2:9002", "client3:9003"]
DEFAULT_PROBE_TIMEOUT = 2.0
DEFAULT_MAX_RETRIES = 0
DEFAULT_MAX_LINE_BYTES = 64 * 1024 * 1024
DEFAULT_DATA_PATH = "data/amazon_reviews_cleaned.csv"
DEFAULT_MASTER_PORT = 9000


def _parse_workers(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _optional_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


@dataclass
class ClusterConfig:
    """Configuration for one master process.

    Attributes:
        workers: Configured worker addresses as "host:port". One partition is
            produced per entry.
        probe_timeout: Seconds allowed for each availability probe.
        exchange_timeout: Optional deadline in seconds for a whole worker
            exchange. None keeps the exchange unbounded.
        max_retries: Extra attempts for a failed exchange with the same worker.
        max_line_bytes: Largest frame accepted on the wire.
        data_path: Ratings CSV loaded by the master and the CLI.
    """

    workers: List[str] = field(default_factory=lambda: list(DEFAULT_WORKERS))
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    exchange_timeout: Optional[float] = None
    max_retries: int = DEFAULT_MAX_RETRIES
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES
    data_path: str = DEFAULT_DATA_PATH

    @classmethod
    def from_env(cls) -> "ClusterConfig":
        """Build a configuration from CLUSTERREC_* environment variables."""
        workers_raw = os.getenv("CLUSTERREC_WORKERS")
        config = cls(
            workers=_parse_workers(workers_raw) if workers_raw else list(DEFAULT_WORKERS),
            probe_timeout=float(os.getenv("CLUSTERREC_PROBE_TIMEOUT", DEFAULT_PROBE_TIMEOUT)),
            exchange_timeout=_optional_float(os.getenv("CLUSTERREC_EXCHANGE_TIMEOUT")),
            max_retries=int(os.getenv("CLUSTERREC_MAX_RETRIES", DEFAULT_MAX_RETRIES)),
            max_line_bytes=int(os.getenv("CLUSTERREC_MAX_LINE_BYTES", DEFAULT_MAX_LINE_BYTES)),
            data_path=os.getenv("CLUSTERREC_DATA_PATH", DEFAULT_DATA_PATH),
        )
        logger.debug(
            "Loaded cluster configuration",
            extra={"workers": config.workers, "data_path": config.data_path},
        )
        return config
