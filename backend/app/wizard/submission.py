"""Submission orchestrator: the ordered, multi-phase final write.

Phases (strict order):
  1. precheck           re-validate the final step; no I/O on failure
  2. upload             local size/type check of every pending file, then
                        concurrent uploads; each file resolved to a public URL
  3. primary_insert     the main record
  4. dependent_inserts  rows referencing the primary id, sequentially
  5. status_transition  the single last write that signals success

The first failure stops the run and is reported as
{"phase", "operation", "message"}. Every side effect that completed is
recorded in the result's journal; `compensate()` can undo them in reverse
order (automatic only when `compensate_failed_submissions` is on).
"""

from __future__ import annotations

import asyncio
import copy
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from app.config import settings
from app.wizard.collaborators import Persistence, PersistenceError, Principal, Storage, StorageError
from app.wizard.files import PendingFile, UploadRejectedError, UploadRule
from app.wizard.steps import StepDefinition

logger = logging.getLogger(__name__)

PHASE_PRECHECK = "precheck"
PHASE_UPLOAD = "upload"
PHASE_PRIMARY_INSERT = "primary_insert"
PHASE_DEPENDENT_INSERTS = "dependent_inserts"
PHASE_STATUS_TRANSITION = "status_transition"


class SubmissionPhaseError(Exception):
    def __init__(self, phase: str, operation: str, message: str, details: dict | None = None):
        self.phase = phase
        self.operation = operation
        self.message = message
        self.details = details
        super().__init__(f"[{phase}] {operation}: {message}")


# ── Result types ────────────────────────────────────────────

@dataclass
class JournalEntry:
    """One completed side effect."""
    action: str  # upload | insert | update
    target: str  # bucket or table
    ref: str  # storage path or row id
    # Values overwritten by an update, used to restore them
    previous: dict | None = None


@dataclass
class SubmissionFailure:
    phase: str
    operation: str
    message: str
    details: dict | None = None

    def to_dict(self) -> dict:
        data = {"phase": self.phase, "operation": self.operation, "message": self.message}
        if self.details:
            data["details"] = self.details
        return data


@dataclass
class SubmissionResult:
    success: bool
    created: dict[str, str] = field(default_factory=dict)
    error: SubmissionFailure | None = None
    journal: list[JournalEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "created": dict(self.created),
            "error": self.error.to_dict() if self.error else None,
            "journal": [asdict(entry) for entry in self.journal],
        }


@dataclass(frozen=True)
class FileSlot:
    """A pending file and where it lives in the draft."""
    location: tuple[str | int, ...]
    file: PendingFile
    bucket: str
    path: str
    rule: UploadRule


# ── Orchestrator base ───────────────────────────────────────

class SubmissionOrchestrator:
    """Subclasses provide the final step, the file slots and the writes."""

    final_step: StepDefinition

    def __init__(
        self,
        storage: Storage,
        persistence: Persistence,
        *,
        compensate: bool | None = None,
    ):
        self.storage = storage
        self.persistence = persistence
        self.auto_compensate = (
            settings.compensate_failed_submissions if compensate is None else compensate
        )
        self._phase: str | None = None

    # Hooks ---------------------------------------------------

    def pending_files(self, draft: Mapping[str, Any], principal: Principal) -> list[FileSlot]:
        raise NotImplementedError

    async def write(
        self,
        draft: Mapping[str, Any],
        principal: Principal,
        journal: list[JournalEntry],
        created: dict[str, str],
    ) -> None:
        raise NotImplementedError

    # Flow ----------------------------------------------------

    async def submit(self, draft: Mapping[str, Any], principal: Principal) -> SubmissionResult:
        journal: list[JournalEntry] = []
        created: dict[str, str] = {}
        name = type(self).__name__
        self._phase = None
        try:
            self._enter(PHASE_PRECHECK)
            self._precheck(draft)
            self._enter(PHASE_UPLOAD)
            resolved = await self._upload_phase(draft, principal, journal)
            await self.write(resolved, principal, journal, created)
        except SubmissionPhaseError as exc:
            logger.warning(
                f"{name} failed in {exc.phase}: {exc.operation} - {exc.message}",
                extra={"principal": principal.id, "completed_steps": len(journal)},
            )
            result = SubmissionResult(
                success=False,
                created=created,
                error=SubmissionFailure(exc.phase, exc.operation, exc.message, exc.details),
                journal=journal,
            )
            if self.auto_compensate and journal:
                await self.compensate(result)
            return result

        logger.info(f"{name} succeeded for {principal.id}: {created}")
        return SubmissionResult(success=True, created=created, journal=journal)

    def _enter(self, phase: str) -> None:
        if phase != self._phase:
            self._phase = phase
            logger.debug(f"{type(self).__name__}: {phase} started")

    def _precheck(self, draft: Mapping[str, Any]) -> None:
        errors = self.final_step.validate(draft)
        if errors:
            raise SubmissionPhaseError(
                PHASE_PRECHECK,
                f"validate:{self.final_step.id}",
                "Please fix the highlighted fields before submitting",
                details={"errors": errors},
            )

    async def _upload_phase(
        self,
        draft: Mapping[str, Any],
        principal: Principal,
        journal: list[JournalEntry],
    ) -> dict[str, Any]:
        slots = self.pending_files(draft, principal)
        if not slots:
            return dict(draft)

        # Reject locally before the first network call
        for slot in slots:
            try:
                slot.rule.check_file(slot.file)
            except UploadRejectedError as exc:
                raise SubmissionPhaseError(PHASE_UPLOAD, f"validate:{exc.filename}", exc.reason)

        urls = await self._upload_all(slots, journal)

        resolved = copy.deepcopy(dict(draft))
        for slot, url in zip(slots, urls):
            node: Any = resolved
            for part in slot.location[:-1]:
                node = node[part]
            node[slot.location[-1]] = url
        return resolved

    async def _upload_all(self, slots: list[FileSlot], journal: list[JournalEntry]) -> list[str]:
        """Upload concurrently; on the first failure cancel the rest.

        Every task has settled before this returns or raises, so the
        journal holds exactly the uploads that completed.
        """
        tasks = [asyncio.create_task(self._upload_one(slot, journal)) for slot in slots]
        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        failed = [task for task in tasks if task in done and task.exception() is not None]
        if not failed:
            return [task.result() for task in tasks]

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.debug(
            f"Upload failed; cancelled {len(pending)} in-flight upload(s), "
            f"{len(journal)} completed"
        )
        raise failed[0].exception()

    async def _upload_one(self, slot: FileSlot, journal: list[JournalEntry]) -> str:
        try:
            stored = await self.storage.upload(
                slot.bucket, slot.path, slot.file.data, slot.file.content_type
            )
            journal.append(JournalEntry("upload", slot.bucket, stored))
            return self.storage.get_public_url(slot.bucket, stored)
        except StorageError as exc:
            raise SubmissionPhaseError(
                PHASE_UPLOAD,
                f"upload:{slot.file.name}",
                f"Failed to upload {slot.file.name}: {exc}",
            )

    # Write helpers used by subclasses -------------------------

    async def insert(
        self, phase: str, table: str, record: Mapping[str, Any], journal: list[JournalEntry]
    ) -> dict:
        self._enter(phase)
        try:
            row = await self.persistence.insert(table, record)
        except PersistenceError as exc:
            raise SubmissionPhaseError(phase, f"insert:{table}", str(exc))
        journal.append(JournalEntry("insert", table, row["id"]))
        return row

    async def update(
        self,
        phase: str,
        table: str,
        id: str,
        patch: Mapping[str, Any],
        journal: list[JournalEntry],
        previous: dict | None = None,
    ) -> None:
        self._enter(phase)
        try:
            await self.persistence.update(table, id, patch)
        except PersistenceError as exc:
            raise SubmissionPhaseError(phase, f"update:{table}", str(exc))
        journal.append(JournalEntry("update", table, id, previous))

    # Compensation --------------------------------------------

    async def compensate(self, result: SubmissionResult) -> list[JournalEntry]:
        """Undo journaled side effects, newest first.

        Returns the entries that could not be undone. Updates recorded
        without `previous` values are not reversible and are returned too.
        """
        leftovers: list[JournalEntry] = []
        for entry in reversed(result.journal):
            try:
                if entry.action == "upload":
                    await self.storage.remove(entry.target, entry.ref)
                elif entry.action == "insert":
                    await self.persistence.delete(entry.target, entry.ref)
                elif entry.action == "update" and entry.previous is not None:
                    await self.persistence.update(entry.target, entry.ref, entry.previous)
                else:
                    leftovers.append(entry)
            except (StorageError, PersistenceError) as exc:
                logger.error(f"Compensation failed for {entry.action} {entry.target}/{entry.ref}: {exc}")
                leftovers.append(entry)
        if leftovers:
            logger.warning(f"{len(leftovers)} side effect(s) left after compensation")
        result.journal = leftovers
        return leftovers
