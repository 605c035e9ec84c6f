"""
PostgreSQL native statement backed by psycopg.

psycopg exceptions carry their own SQLSTATE. There is no numeric error
code in libpq, so the error number is the result status of a failed
command (PGRES_FATAL_ERROR), as the PostgreSQL PDO driver reports it.
"""
import psycopg
from psycopg import pq

from stmtadapter.native.base import SQLSTATE_GENERAL_ERROR, DbapiStatement
from stmtadapter.native.base import register_driver


@register_driver('postgresql')
class PostgresStatement(DbapiStatement):
    """Prepared statement on a psycopg connection (%s placeholders).
    """

    dialect = 'postgresql'
    driver_errors = psycopg.Error

    def sqlstate_for(self, err: BaseException) -> str:
        return getattr(err, 'sqlstate', None) or SQLSTATE_GENERAL_ERROR

    def errno_for(self, err: BaseException) -> int:
        return int(pq.ExecStatus.FATAL_ERROR)

    def message_for(self, err: BaseException) -> str:
        diag = getattr(err, 'diag', None)
        message = getattr(diag, 'message_primary', None) if diag is not None else None
        return message or str(err)
