from __future__ import annotations


class MigrationError(RuntimeError):
    pass


class DatabaseConnectionError(MigrationError):
    """The document store could not be reached or refused the credentials. No step has run."""


class LedgerWriteError(MigrationError):
    """
    The ledger itself could not be read or written.

    Without the ledger the runner cannot know what was applied, so this always aborts the run
    and is never recorded as a step failure.
    """


class StepExecutionError(MigrationError):
    def __init__(self, message: str, step: str | None = None):
        super().__init__(message)
        self.step = step

    def __str__(self) -> str:
        msg = super().__str__()
        return f"{self.step}: {msg}" if self.step else msg


class MissingDependencyError(StepExecutionError):
    def __init__(self, collection: str, key: dict[str, object], step: str | None = None):
        self.collection = collection
        self.key = key
        super().__init__(f"missing dependency: no {collection} document matching {key!r}", step=step)


class ResetRefusedError(MigrationError):
    pass
