"""
Ducat Ledger Epoch Processing

Validates every organization of a registry against one ledger snapshot and
closes the epoch of those that validate. Each organization is held under
its own asyncio.Lock for the whole pass; different organizations are
processed concurrently, bounded by a semaphore.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ducat.config import ValidationConfig
from ducat.ledger.snapshot import KIND_TRANSACTION_ROOT, LedgerSnapshot
from ducat.org.organization import Organization
from ducat.org.registry import OrganizationRegistry
from ducat.org.validation import ValidationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrganizationEpochResult:
    """Validation outcome for one organization."""
    identifier: str
    serial_numbers: ValidationResult
    transaction_roots: ValidationResult
    closed: bool
    final_balance: int

    @property
    def valid(self) -> bool:
        return self.serial_numbers.valid and self.transaction_roots.valid


@dataclass
class EpochReport:
    """Outcome of one epoch pass."""
    height: int
    results: Dict[str, OrganizationEpochResult] = field(default_factory=dict)

    @property
    def closed(self) -> List[str]:
        return [i for i, r in self.results.items() if r.closed]

    @property
    def failed(self) -> List[str]:
        return [i for i, r in self.results.items() if not r.valid]

    @property
    def ok(self) -> bool:
        return not self.failed


class EpochProcessor:
    """
    Runs epoch validation passes.

    The processor owns one lock per organization identifier, so two passes
    never mutate the same organization at once.
    """

    def __init__(self, config: Optional[ValidationConfig] = None):
        self.config = config or ValidationConfig()
        if self.config.max_concurrent_validations < 1:
            raise ValueError("max_concurrent_validations must be at least 1")
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, identifier: str) -> asyncio.Lock:
        lock = self._locks.get(identifier)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[identifier] = lock
        return lock

    async def validate_organization(
        self,
        org: Organization,
        snapshot: LedgerSnapshot,
    ) -> OrganizationEpochResult:
        """Validate one organization and close its epoch if configured."""
        async with self._lock_for(org.identifier):
            serials = org.validate_serial_numbers(snapshot)
            if self.config.check_transaction_roots:
                roots = org.validate_transaction_roots(snapshot)
            else:
                roots = ValidationResult(kind=KIND_TRANSACTION_ROOT, checked=0)

            closed = False
            if serials and roots and self.config.close_on_success:
                org.close_epoch()
                closed = True
            elif not (serials and roots):
                logger.warning(
                    f"{org.identifier}: epoch left open at height {snapshot.height}, "
                    f"pending delta {org.epoch_delta}"
                )

            return OrganizationEpochResult(
                identifier=org.identifier,
                serial_numbers=serials,
                transaction_roots=roots,
                closed=closed,
                final_balance=org.final_balance,
            )

    async def process_epoch(
        self,
        registry: OrganizationRegistry,
        snapshot: LedgerSnapshot,
    ) -> EpochReport:
        """Validate all organizations against the same snapshot."""
        semaphore = asyncio.Semaphore(self.config.max_concurrent_validations)

        async def run(org: Organization) -> OrganizationEpochResult:
            async with semaphore:
                return await self.validate_organization(org, snapshot)

        results = await asyncio.gather(*(run(org) for org in registry))

        report = EpochReport(height=snapshot.height)
        for result in results:
            report.results[result.identifier] = result

        logger.info(
            f"Epoch at height {snapshot.height}: {len(report.closed)} closed, "
            f"{len(report.failed)} failed"
        )
        return report
