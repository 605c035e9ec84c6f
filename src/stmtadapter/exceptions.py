"""
Statement adapter exception classes.
"""
import sqlite3

import psycopg


class DatabaseError(Exception):
    """Base class for all statement adapter errors.
    """


class InvalidFetchArgumentError(DatabaseError, ValueError):
    """Caller passed an argument no fetch mode can work with.
    """


class UnsupportedFetchModeError(InvalidFetchArgumentError):
    """Fetch mode is not one of the modes the adapter emulates.
    """


class InvalidColumnIndexError(DatabaseError, RuntimeError):
    """A row in a bulk column fetch has no value at the requested index.
    """


class ResultClosedError(DatabaseError):
    """Fetch attempted on a result that was already freed.
    """


class UnsupportedDriverError(DatabaseError, ValueError):
    """No native driver is registered for the connection's dialect.
    """


# Driver errors the native layer turns into error state instead of raising
NativeDriverError = (
    sqlite3.Error,
    psycopg.Error,
    )
