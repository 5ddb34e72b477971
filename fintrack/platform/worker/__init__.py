"""Worker runtime and dispatch loop for the platform outbox."""

from fintrack.platform.worker.config import DispatchConfig
from fintrack.platform.worker.dispatcher import (
    claim_ready_messages,
    process_ready_batch,
    run_dispatcher,
)

__all__ = [
    "DispatchConfig",
    "claim_ready_messages",
    "process_ready_batch",
    "run_dispatcher",
]
