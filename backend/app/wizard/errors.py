"""Errors raised by the wizard core.

Validation failures are NOT exceptions: step validators return a
{field_path: message} map and the controller stores it. These classes
cover misuse of the controller and non-recoverable input.
"""


class WizardError(Exception):
    """Base class for wizard control-flow errors."""


class UnknownPropertyType(WizardError, ValueError):
    """The property-type discriminant is not one of the known variants."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Unknown property type: {value!r}")


class DraftLockedError(WizardError):
    """The draft was modified after submission started."""

    def __init__(self, message: str = "Draft is locked while a submission is in progress"):
        super().__init__(message)


class StepOutOfRange(WizardError, IndexError):
    def __init__(self, index: int, step_count: int):
        self.index = index
        self.step_count = step_count
        super().__init__(f"Step {index} is outside 0..{step_count - 1}")
