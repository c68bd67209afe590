class SchedulerError(ValueError):
    """Base class for errors raised by the simulator."""


class UnknownAlgorithmError(SchedulerError):
    def __init__(self, name: str):
        super().__init__(f"Unknown algorithm '{name}'")
        self.name = name


class InvalidWorkloadError(SchedulerError):
    """Process data that cannot be simulated (empty set, bad fields, ...)."""
