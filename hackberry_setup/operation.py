"""Operation model.

Each operation follows the same discipline:

- guard: is the feature enabled for this run
- probe: does the desired state already hold on the host
- apply: make the minimal change (only after probe said it is needed)
- verify: re-check the post-condition

``run`` always returns exactly one OperationResult and never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .config import SetupConfig
from .errors import Unactionable
from .lib.command import CommandError
from .lib.host import Host
from .outcome import OperationResult, Outcome

logger = logging.getLogger(__name__)


class Operation:
    name: str = ""
    description: str = ""

    def guard(self, config: SetupConfig) -> bool:
        return True

    def probe(self, config: SetupConfig, host: Host) -> bool:
        raise NotImplementedError

    def apply(self, config: SetupConfig, host: Host) -> Optional[str]:
        raise NotImplementedError

    def verify(self, config: SetupConfig, host: Host) -> bool:
        return self.probe(config, host)

    def reconcile(self, config: SetupConfig, host: Host) -> OperationResult:
        detail = self.apply(config, host)
        if not self.verify(config, host):
            return self._result(Outcome.FAILED, "verification failed after apply")
        return self._result(Outcome.SUCCESS, detail or "applied")

    def run(self, config: SetupConfig, host: Optional[Host] = None) -> OperationResult:
        host = host or Host(dry_run=config.dry_run)
        try:
            if not self.guard(config):
                logger.info("[%s] disabled by configuration", self.name)
                return self._result(Outcome.SKIPPED_BY_FLAG, "disabled by configuration")

            try:
                satisfied = self.probe(config, host)
            except Unactionable as e:
                logger.warning("[%s] not actionable: %s", self.name, e)
                return self._result(Outcome.SKIPPED_OTHER, str(e))

            if satisfied:
                logger.info("[%s] already in desired state", self.name)
                return self._result(Outcome.SKIPPED_OTHER, "already configured")

            if host.dry_run:
                logger.info("[%s] would apply changes (dry run)", self.name)
                return self._result(Outcome.SKIPPED_OTHER, "dry run: change pending")

            logger.info("[%s] applying", self.name)
            return self.reconcile(config, host)
        except Exception as e:
            logger.exception("[%s] failed", self.name)
            return self._result(Outcome.FAILED, _describe(e))

    def _result(self, outcome: Outcome, detail: str = "", warnings: Iterable[str] = ()) -> OperationResult:
        return OperationResult(name=self.name, outcome=outcome, detail=detail, warnings=tuple(warnings))


def _describe(e: Exception) -> str:
    if isinstance(e, CommandError):
        return str(e).splitlines()[0]
    return str(e) or type(e).__name__


# Batch reconciliation


class TargetState(str, Enum):
    SATISFIED = "satisfied"
    PENDING = "pending"
    ABSENT = "absent"


class BatchStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class BatchResult:
    reconciled: List[str] = field(default_factory=list)
    already: List[str] = field(default_factory=list)
    absent: List[str] = field(default_factory=list)
    rejected: List[Tuple[str, str]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def status(self) -> BatchStatus:
        if self.error is not None:
            return BatchStatus.FAILED
        if self.absent or self.rejected:
            return BatchStatus.PARTIAL
        return BatchStatus.COMPLETE

    @property
    def warnings(self) -> List[str]:
        out = [f"{t}: not present" for t in self.absent]
        out.extend(f"{t}: {reason or 'rejected by service manager'}" for t, reason in self.rejected)
        return out

    def summary(self) -> str:
        parts = [f"{len(self.reconciled)} changed"]
        if self.already:
            parts.append(f"{len(self.already)} already done")
        if self.absent:
            parts.append(f"{len(self.absent)} not present")
        if self.rejected:
            parts.append(f"{len(self.rejected)} rejected")
        return ", ".join(parts)


class BatchOperation(Operation):
    """One operation over several independent sub-targets, best effort.

    Missing or rejected sub-targets are soft warnings. Only a failure to
    query the host at all fails the operation.
    A pass that changes nothing, because every pending target was rejected,
    records SKIPPED_OTHER so repeated runs do not report the same refusal as
    a change.
    """

    def targets(self, config: SetupConfig) -> List[str]:
        raise NotImplementedError

    def target_state(self, host: Host, target: str) -> TargetState:
        raise NotImplementedError

    def reconcile_target(self, host: Host, target: str) -> Tuple[bool, str]:
        raise NotImplementedError

    def probe(self, config: SetupConfig, host: Host) -> bool:
        return all(self.target_state(host, t) is not TargetState.PENDING for t in self.targets(config))

    def reconcile_batch(self, config: SetupConfig, host: Host) -> BatchResult:
        result = BatchResult()
        for target in self.targets(config):
            try:
                state = self.target_state(host, target)
            except CommandError as e:
                result.error = _describe(e)
                return result

            if state is TargetState.ABSENT:
                result.absent.append(target)
                continue
            if state is TargetState.SATISFIED:
                result.already.append(target)
                continue

            ok, reason = self.reconcile_target(host, target)
            if ok:
                result.reconciled.append(target)
            else:
                logger.warning("[%s] %s: %s", self.name, target, reason or "rejected")
                result.rejected.append((target, reason))
        return result

    def reconcile(self, config: SetupConfig, host: Host) -> OperationResult:
        batch = self.reconcile_batch(config, host)
        if batch.status is BatchStatus.FAILED:
            return self._result(Outcome.FAILED, batch.error or "batch failed")
        if not batch.reconciled:
            return self._result(Outcome.SKIPPED_OTHER, f"nothing changed: {batch.summary()}", batch.warnings)
        return self._result(Outcome.SUCCESS, f"{batch.status.value}: {batch.summary()}", batch.warnings)
