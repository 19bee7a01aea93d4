"""
Errors raised when a batch, quantum or policy is rejected before a run.
"""


class SchedulingError(ValueError):
    pass


class InvalidBatch(SchedulingError):
    """Empty batch, non-positive burst time, negative arrival or malformed record."""


class InvalidQuantum(SchedulingError):
    """Round Robin was asked to run without a positive time quantum."""


class UnknownPolicy(SchedulingError):
    def __init__(self, name: str, known=()):
        self.name = name
        msg = f"Unknown scheduling policy '{name}'"
        if known:
            msg += f" (choose from: {', '.join(known)})"
        super().__init__(msg)
