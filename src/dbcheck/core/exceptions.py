# src/dbcheck/core/exceptions.py
"""
Error taxonomy for dbcheck.

  NotFound / ProviderFailure / AssemblyCancelled / ConfigurationError
      fatal to snapshot assembly; nothing downstream runs without a snapshot.
      AssemblyCancelled also ends evaluation and the gate once the deadline
      has passed.
  QueryFailure
      local to one evaluator, which logs it and returns an empty result.
  PolicyViolation
      a user-facing failure of the lambda-integration gate.
"""


class DbcheckError(Exception):
    """Base class for every error raised by dbcheck."""


class NotFound(DbcheckError):
    """A hosted zone, record or cluster could not be matched."""


class ConfigurationError(DbcheckError):
    """The environment is set up in a way dbcheck cannot interpret."""


class AssemblyCancelled(DbcheckError):
    """The invocation deadline expired before the work was complete."""


class ProviderFailure(DbcheckError):
    """A control-plane call failed."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")


class QueryFailure(DbcheckError):
    """A database statement failed."""

    def __init__(self, statement: str, cause: Exception):
        self.statement = statement
        self.cause = cause
        super().__init__(f"query {statement!r} failed: {cause}")


class PolicyViolation(DbcheckError):
    """The lambda-integration gate rejected the configuration at `step`."""

    def __init__(self, step: str, reason: str):
        self.step = step
        self.reason = reason
        super().__init__(reason)
