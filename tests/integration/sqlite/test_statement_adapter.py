"""
Statement adapter behavior against an in-memory SQLite database.
"""
import gc
import sqlite3
from unittest.mock import patch

import pytest
import stmtadapter
from stmtadapter import FetchMode, InvalidColumnIndexError, ParamType

from tests.fixtures.values import Point


def test_fetch_before_execute(prepare_sqlite):
    stmt = prepare_sqlite('SELECT id, name FROM test_table')
    assert stmt.fetch() is False
    assert stmt.fetch_column() is False
    assert stmt.fetch_all() == []


def test_execute_without_placeholders_skips_bind(prepare_sqlite):
    stmt = prepare_sqlite('SELECT COUNT(*) FROM test_table')

    with patch.object(stmt.statement, 'bind_param', wraps=stmt.statement.bind_param) as bind:
        assert stmt.execute() is True

    bind.assert_not_called()
    assert stmt.fetch_column() == 3


@pytest.mark.parametrize('mode', [FetchMode.BOTH, FetchMode.ASSOC, FetchMode.NUM, FetchMode.COLUMN])
def test_repeated_fetch_matches_fetch_all(prepare_sqlite, mode):
    sql = 'SELECT id, name, value FROM test_table ORDER BY id'
    stmt = prepare_sqlite(sql)

    stmt.execute()
    fetched = []
    while True:
        row = stmt.fetch(mode)
        if row is False:
            break
        fetched.append(row)

    stmt.execute()
    assert fetched == stmt.fetch_all(mode)
    assert len(fetched) == 3


def test_repeated_fetch_matches_fetch_all_class(prepare_sqlite):
    stmt = prepare_sqlite('SELECT x, y FROM points ORDER BY x')

    stmt.execute()
    fetched = [vars(stmt.fetch(FetchMode.CLASS, Point)) for _ in range(2)]
    assert stmt.fetch(FetchMode.CLASS, Point) is False

    stmt.execute()
    assert fetched == [vars(row) for row in stmt.fetch_all(FetchMode.CLASS, Point)]


def test_fetch_shapes(prepare_sqlite):
    stmt = prepare_sqlite("SELECT id, name FROM test_table WHERE name = 'Alice'")
    stmt.execute()
    assert stmt.fetch() == {0: 1, 'id': 1, 1: 'Alice', 'name': 'Alice'}

    stmt.execute()
    assert stmt.fetch(FetchMode.ASSOC) == {'id': 1, 'name': 'Alice'}

    stmt.execute()
    assert stmt.fetch(FetchMode.NUM) == [1, 'Alice']


def test_bound_parameters(prepare_sqlite):
    stmt = prepare_sqlite('SELECT name FROM test_table WHERE value > ? AND name <> ? ORDER BY id')
    stmt.bind_value(1, 15, ParamType.INT)
    stmt.bind_value(2, 'Charlie')

    assert stmt.execute()
    assert stmt.fetch_all(FetchMode.COLUMN) == ['Bob']


def test_string_bound_number_compares_numerically(prepare_sqlite):
    stmt = prepare_sqlite('SELECT name FROM test_table WHERE value = ?')
    stmt.bind_value(1, 20)

    assert stmt.bind_types == 's'
    assert stmt.execute()
    assert stmt.fetch_column() == 'Bob'


def test_input_parameters(prepare_sqlite):
    stmt = prepare_sqlite('SELECT value FROM test_table WHERE name = ?')

    assert stmt.execute(['Charlie'])
    assert stmt.fetch_column() == 30

    assert stmt.execute(('Alice',))
    assert stmt.fetch_column() == 10


def test_named_input_parameters(prepare_sqlite):
    stmt = prepare_sqlite('SELECT :b AS b, :a AS a')

    assert stmt.execute({'a': 'A', 'b': 'B'})
    assert stmt.fetch(FetchMode.ASSOC) == {'b': 'B', 'a': 'A'}


def test_named_input_parameters_in_where_clause(prepare_sqlite):
    stmt = prepare_sqlite('SELECT name FROM test_table WHERE value > :low AND name <> :skip ORDER BY id')

    assert stmt.execute({'skip': 'Charlie', 'low': 15})
    assert stmt.fetch_all(FetchMode.COLUMN) == ['Bob']


def test_missing_named_input_parameter(prepare_sqlite):
    stmt = prepare_sqlite('SELECT :a, :b')

    assert stmt.execute({'a': 1}) is False
    assert stmt.error_code() == 'HY000'


def test_bound_and_input_parameters(prepare_sqlite):
    stmt = prepare_sqlite('SELECT name FROM test_table WHERE value >= ? AND name <> ?')
    stmt.bind_value(1, 20, ParamType.INT)

    assert stmt.execute(['Bob'])
    assert stmt.fetch_all(FetchMode.COLUMN) == ['Charlie']


def test_boolean_binding_matches_integers(sqlite_conn, prepare_sqlite):
    sqlite_conn.execute('CREATE TABLE flags (id INTEGER, active INTEGER)')
    sqlite_conn.execute('INSERT INTO flags VALUES (1, 1), (2, 0), (3, 1)')

    sql = 'SELECT id FROM flags WHERE active = ? ORDER BY id'
    for flag, number in [(True, 1), (False, 0)]:
        by_bool = prepare_sqlite(sql)
        by_bool.bind_value(1, flag, ParamType.BOOL)
        by_int = prepare_sqlite(sql)
        by_int.bind_value(1, number, ParamType.INT)

        assert by_bool.execute() and by_int.execute()
        assert by_bool.fetch_all(FetchMode.COLUMN) == by_int.fetch_all(FetchMode.COLUMN)


@pytest.mark.parametrize('data_type', [ParamType.NULL, ParamType.INT, ParamType.STR])
def test_null_binding_stores_sql_null(sqlite_conn, prepare_sqlite, data_type):
    update = prepare_sqlite('UPDATE test_table SET value = ? WHERE name = ?')
    update.bind_value(1, None, data_type)
    update.bind_value(2, 'Alice')

    assert update.execute()
    assert update.row_count() == 1

    check = prepare_sqlite("SELECT COUNT(*) FROM test_table WHERE value IS NULL AND name = 'Alice'")
    check.execute()
    assert check.fetch_column() == 1


def test_float_binding(sqlite_conn, prepare_sqlite):
    sqlite_conn.execute('CREATE TABLE prices (amount REAL)')
    insert = prepare_sqlite('INSERT INTO prices (amount) VALUES (?)')
    insert.bind_value(1, 2.5)

    assert insert.bind_types == 'd'
    assert insert.execute()

    select = prepare_sqlite('SELECT amount, typeof(amount) FROM prices')
    select.execute()
    assert select.fetch(FetchMode.NUM) == [2.5, 'real']


def test_blob_binding(sqlite_conn, prepare_sqlite):
    sqlite_conn.execute('CREATE TABLE blobs (data BLOB)')
    insert = prepare_sqlite('INSERT INTO blobs (data) VALUES (?)')
    insert.bind_value(1, b'\x00\xff', ParamType.LOB)

    assert insert.execute()

    select = prepare_sqlite('SELECT data FROM blobs')
    select.execute()
    assert select.fetch_column() == b'\x00\xff'


def test_fetch_column_out_of_range(prepare_sqlite):
    stmt = prepare_sqlite('SELECT id, name FROM test_table ORDER BY id')
    stmt.execute()

    assert stmt.fetch_column(2) is False
    assert stmt.fetch_column(1) == 'Bob'


def test_fetch_all_column_out_of_range_raises(prepare_sqlite):
    stmt = prepare_sqlite('SELECT id, name FROM test_table')
    stmt.execute()

    with pytest.raises(InvalidColumnIndexError):
        stmt.fetch_all(FetchMode.COLUMN, 2)


def test_set_fetch_mode_class(prepare_sqlite):
    stmt = prepare_sqlite('SELECT x, y FROM points ORDER BY x')
    stmt.set_fetch_mode(FetchMode.CLASS, Point)
    stmt.execute()

    row = stmt.fetch()
    assert isinstance(row, Point)
    assert (row.x, row.y) == (1, 2)


def test_set_fetch_mode_class_by_path(prepare_sqlite):
    stmt = prepare_sqlite('SELECT x, y FROM points ORDER BY x',
                          fetch_mode=FetchMode.CLASS,
                          fetch_argument='tests.fixtures.values.Point')
    stmt.execute()

    assert [(p.x, p.y) for p in stmt] == [(1, 2), (3, 4)]


def test_iteration_single_pass(prepare_sqlite):
    stmt = prepare_sqlite('SELECT name FROM test_table ORDER BY id')
    stmt.set_fetch_mode(FetchMode.COLUMN)
    stmt.execute()

    assert list(stmt) == ['Alice', 'Bob', 'Charlie']
    assert list(stmt) == []

    stmt.execute()
    assert list(stmt) == ['Alice', 'Bob', 'Charlie']


def test_row_count_after_update(prepare_sqlite):
    stmt = prepare_sqlite('UPDATE test_table SET value = value + 1')

    assert stmt.execute()
    assert stmt.row_count() == 3
    assert stmt.fetch() is False


def test_integrity_error(prepare_sqlite):
    stmt = prepare_sqlite('INSERT INTO test_table (name, value) VALUES (?, ?)')
    stmt.bind_value(1, 'Alice')
    stmt.bind_value(2, 1, ParamType.INT)

    assert stmt.execute() is False
    assert stmt.error_code() == '23000'
    sqlstate, code, message = stmt.error_info()
    assert sqlstate == '23000'
    assert code != 0
    assert 'UNIQUE' in message


def test_syntax_error(prepare_sqlite):
    stmt = prepare_sqlite('SELEC name FROM test_table')

    assert stmt.execute() is False
    assert stmt.error_info().sqlstate == 'HY000'
    assert stmt.error_info().code == 1
    assert 'syntax error' in stmt.error_info().message


def test_placeholder_count_mismatch(prepare_sqlite):
    stmt = prepare_sqlite('SELECT name FROM test_table WHERE id = ?')

    assert stmt.execute() is False
    assert stmt.error_code() == 'HY000'


def test_error_state_resets_on_success(prepare_sqlite):
    stmt = prepare_sqlite('SELECT name FROM test_table WHERE id = ?')
    assert stmt.execute() is False

    assert stmt.execute([1])
    assert stmt.error_info() == ('00000', 0, '')


def test_failed_execute_keeps_previous_result(prepare_sqlite):
    stmt = prepare_sqlite('SELECT name FROM test_table WHERE id >= ? ORDER BY id')
    assert stmt.execute([2])

    stmt.bind_value(1, 'x', ParamType.STR)
    assert stmt.execute(['too many']) is False

    assert stmt.fetch_column() == 'Bob'


def test_destroying_adapter_releases_result(sqlite_conn):
    adapter = stmtadapter.prepare(sqlite_conn, 'SELECT id FROM test_table')
    native = adapter.statement
    adapter.execute()
    adapter.fetch()
    assert native.open_results == 1

    del adapter
    gc.collect()

    assert native.open_results == 0


def test_reexecute_releases_previous_result(prepare_sqlite):
    stmt = prepare_sqlite('SELECT id FROM test_table')
    for _ in range(3):
        stmt.execute()
    assert stmt.statement.open_results == 1

    stmt.close()
    assert stmt.statement.open_results == 0


def test_sqlite_row_factory(sqlite_conn, prepare_sqlite):
    sqlite_conn.row_factory = sqlite3.Row
    stmt = prepare_sqlite('SELECT id, name FROM test_table ORDER BY id')
    stmt.execute()

    assert stmt.fetch(FetchMode.ASSOC) == {'id': 1, 'name': 'Alice'}
    assert stmt.fetch(FetchMode.NUM) == [2, 'Bob']


def test_independent_statements_on_one_connection(prepare_sqlite):
    select = prepare_sqlite('SELECT name FROM test_table ORDER BY id')
    update = prepare_sqlite("UPDATE test_table SET value = 0 WHERE name = 'Charlie'")

    select.execute()
    assert select.fetch_column() == 'Alice'
    assert update.execute()
    assert select.fetch_column() == 'Bob'


if __name__ == '__main__':
    __import__('pytest').main([__file__])
