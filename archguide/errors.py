from __future__ import annotations


class ArchguideError(Exception):
    """Base class for errors raised by archguide."""


class PersistenceDisabled(ArchguideError):
    """The persistence directory does not exist, so nothing can be stored."""


class StepError(ArchguideError):
    """A step body could not finish; shown to the operator, never fatal."""


class OperatorAbort(ArchguideError):
    """The operator interrupted the run at a prompt."""
