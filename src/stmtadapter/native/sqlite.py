"""
SQLite native statement.

Error state follows the SQLite PDO driver: constraint violations report
SQLSTATE 23000, everything else HY000, with the SQLite result code as the
error number.
"""
import sqlite3

from stmtadapter.native.base import SQLSTATE_GENERAL_ERROR, DbapiStatement
from stmtadapter.native.base import register_driver

SQLSTATE_INTEGRITY_CONSTRAINT = '23000'
SQLITE_ERROR = 1


@register_driver('sqlite')
class SqliteStatement(DbapiStatement):
    """Prepared statement on a sqlite3 connection (qmark or named placeholders).
    """

    dialect = 'sqlite'
    driver_errors = sqlite3.Error

    def sqlstate_for(self, err: BaseException) -> str:
        if isinstance(err, sqlite3.IntegrityError):
            return SQLSTATE_INTEGRITY_CONSTRAINT
        return SQLSTATE_GENERAL_ERROR

    def errno_for(self, err: BaseException) -> int:
        return getattr(err, 'sqlite_errorcode', None) or SQLITE_ERROR
