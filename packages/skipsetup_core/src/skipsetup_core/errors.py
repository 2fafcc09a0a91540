from __future__ import annotations


class ScaffoldError(RuntimeError):
    pass


class CommandNotFoundError(ScaffoldError):
    pass


class CommandFailedError(ScaffoldError):
    def __init__(self, argv: list[str], returncode: int) -> None:
        super().__init__(f"Command failed ({returncode}): {' '.join(argv)}")
        self.argv = list(argv)
        self.returncode = returncode


class CommandTimeoutError(ScaffoldError):
    def __init__(self, argv: list[str], timeout_seconds: float) -> None:
        super().__init__(f"Command timed out after {timeout_seconds:.1f}s: {' '.join(argv)}")
        self.argv = list(argv)
        self.timeout_seconds = timeout_seconds


class StageError(ScaffoldError):
    """Raised by a stage action when the stage cannot complete."""
