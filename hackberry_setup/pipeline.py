from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, Sequence

from .config import SetupConfig
from .lib.host import Host
from .outcome import OperationResult, Outcome, RunRecorder

logger = logging.getLogger(__name__)


class Step(Protocol):
    """Anything the runner can execute."""

    name: str

    def run(self, config: SetupConfig, host: Optional[Host] = None) -> OperationResult:
        ...


ResultCallback = Callable[[OperationResult], None]


def _check_unique(operations: Sequence[Step]) -> None:
    seen: set[str] = set()
    for op in operations:
        if not op.name:
            raise ValueError(f"Operation {op!r} has no name")
        if op.name in seen:
            raise ValueError(f"Duplicate operation name: {op.name}")
        seen.add(op.name)


def run_operations(
    operations: Sequence[Step],
    config: SetupConfig,
    *,
    host: Optional[Host] = None,
    on_result: Optional[ResultCallback] = None,
) -> RunRecorder:
    """Run operations strictly in order; one failure never stops the rest."""

    _check_unique(operations)
    host = host or Host(dry_run=config.dry_run)
    recorder = RunRecorder()

    for op in operations:
        logger.info("Running operation %s", op.name)
        try:
            result = op.run(config, host)
        except Exception as e:
            logger.exception("Operation %s raised past its boundary", op.name)
            result = OperationResult(name=op.name, outcome=Outcome.FAILED, detail=str(e) or type(e).__name__)

        recorder.record(result)
        logger.info("Operation %s: %s %s", op.name, result.outcome.value, result.detail)
        if on_result is not None:
            try:
                on_result(result)
            except Exception:
                logger.exception("Reporting the result of %s failed", op.name)

    logger.info(
        "Run finished: %d ok, %d failed, %d skipped",
        recorder.success,
        recorder.failed,
        len(recorder.skipped_by_flag) + len(recorder.skipped_other),
    )
    return recorder
