"""Exception types raised by ormlet."""


class OrmletError(Exception):
    """Base class for every error raised by ormlet."""


class BuildError(OrmletError):
    """A query builder invariant was violated (bad limit, unknown join kind, ...)."""


class ConfigurationError(OrmletError, ValueError):
    """Invalid settings, unsupported database URL, or failure to open the connection."""


class PersistenceError(OrmletError):
    """The database rejected a statement. The driver exception is kept as ``__cause__``."""


class PreparationError(PersistenceError):
    """A statement could not be prepared (malformed SQL, lost connection)."""


class ExecutionError(PersistenceError):
    """A prepared statement failed to execute (constraint violation, type mismatch, ...)."""
