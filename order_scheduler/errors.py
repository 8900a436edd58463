"""Exception types raised by the scheduling core and its I/O collaborators."""


class SchedulingError(Exception):
    """Base class for every failure reported by the order scheduler."""


class InvalidScheduleInput(SchedulingError, ValueError):
    """Input that the simulator cannot schedule.

    Raised for unknown product variants, non-positive quantities, duplicate
    order ids, malformed input lines or a stage without machines. Carries the
    offending order id and stage (when known) so the caller can point at it.
    """

    def __init__(self, message: str, order_id: str | None = None, stage: int | None = None):
        super().__init__(message)
        self.order_id = order_id
        self.stage = stage


class ScheduleInvariantError(SchedulingError, RuntimeError):
    """A piece could not be placed although the input was validated."""

    def __init__(self, message: str, order_id: str | None = None, stage: int | None = None):
        super().__init__(message)
        self.order_id = order_id
        self.stage = stage
