"""Wizard controller: step index, draft and per-section errors.

Navigation rules:
  - advance()  validates the current step; on failure stores the errors
               for that step and stays put, on success clears them and
               moves forward (saturating at the last step).
  - retreat()  moves back one step (saturating at 0), no validation.
  - jump(i)    backwards freely; forwards only if every step in between
               validates (stops at the first failing one).
  - submit()   only from the last step; hands a locked snapshot of the
               draft to a submission orchestrator.

The controller is framework-agnostic and synchronous except for submit().
`to_state()` / `from_state()` round-trip it through a JSON column.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Mapping, Sequence

from app.wizard.draft import PathLike, merge
from app.wizard.errors import DraftLockedError, StepOutOfRange, WizardError
from app.wizard.steps import FieldErrors, StepDefinition

logger = logging.getLogger(__name__)


class WizardController:
    def __init__(
        self,
        steps: Sequence[StepDefinition],
        draft: Mapping[str, Any] | None = None,
        current_step: int = 0,
        errors: Mapping[str, FieldErrors] | None = None,
    ):
        if not steps:
            raise WizardError("A wizard needs at least one step")
        self.steps = list(steps)
        self._draft: dict[str, Any] = dict(draft or {})
        self.current_step = min(max(current_step, 0), len(self.steps) - 1)
        self.errors: dict[str, FieldErrors] = {k: dict(v) for k, v in (errors or {}).items()}
        self.submission_error: dict | None = None
        self.locked = False

    # ── State ───────────────────────────────────────────────

    @property
    def draft(self) -> dict[str, Any]:
        return self._draft

    @property
    def step(self) -> StepDefinition:
        return self.steps[self.current_step]

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def is_last_step(self) -> bool:
        return self.current_step == len(self.steps) - 1

    def to_state(self) -> dict:
        return {
            "current_step": self.current_step,
            "draft_data": self._draft,
            "errors": self.errors,
        }

    @classmethod
    def from_state(cls, steps: Sequence[StepDefinition], state: Mapping[str, Any]) -> "WizardController":
        return cls(
            steps,
            draft=state.get("draft_data"),
            current_step=state.get("current_step", 0),
            errors=state.get("errors"),
        )

    # ── Draft ───────────────────────────────────────────────

    def update(self, partial: Mapping[str, Any], path: PathLike = None) -> dict[str, Any]:
        """Merge `partial` into the draft. No validation happens here."""
        if self.locked:
            raise DraftLockedError()
        self._draft = merge(self._draft, partial, path)
        return self._draft

    # ── Validation ──────────────────────────────────────────

    def validate_step(self, index: int | None = None) -> FieldErrors:
        step = self.steps[self.current_step if index is None else index]
        return step.validate(self._draft)

    def _gate(self, index: int) -> bool:
        step = self.steps[index]
        errors = step.validate(self._draft)
        if errors:
            self.errors[step.id] = errors
            logger.debug(f"Step {step.id!r} blocked: {sorted(errors)}")
            return False
        self.errors.pop(step.id, None)
        return True

    # ── Navigation ──────────────────────────────────────────

    def advance(self) -> bool:
        """Validate the current step and move forward. Returns True if valid."""
        if not self._gate(self.current_step):
            return False
        self.current_step = min(self.current_step + 1, len(self.steps) - 1)
        return True

    def retreat(self) -> bool:
        if self.current_step == 0:
            return False
        self.current_step -= 1
        return True

    def jump(self, index: int) -> bool:
        if not 0 <= index < len(self.steps):
            raise StepOutOfRange(index, len(self.steps))
        if index <= self.current_step:
            self.current_step = index
            return True
        for i in range(self.current_step, index):
            if not self._gate(i):
                self.current_step = i
                return False
        self.current_step = index
        return True

    # ── Submission ──────────────────────────────────────────

    def begin_submission(self) -> dict[str, Any]:
        """Lock the draft and return an independent snapshot of it."""
        if not self.is_last_step:
            raise WizardError("Submit is only available from the final step")
        if self.locked:
            raise DraftLockedError("A submission is already in progress")
        self.locked = True
        self.submission_error = None
        return copy.deepcopy(self._draft)

    def finish_submission(self, result) -> None:
        if result.success:
            return  # stays locked: a submitted draft is never edited again
        self.locked = False
        self.submission_error = result.error.to_dict() if result.error else None

    async def submit(self, orchestrator, principal):
        snapshot = self.begin_submission()
        try:
            result = await orchestrator.submit(snapshot, principal)
        except BaseException:
            self.locked = False
            raise
        self.finish_submission(result)
        return result
