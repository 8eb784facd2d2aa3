from __future__ import annotations

from src.attendance_recalc.attendance_recalc.employees.mysql_employee_repository import MySQLEmployeeRepository


class FakeCursor:
    def __init__(self, rows):
        self._rows = rows
        self.executed = []
        self.rowcount = 0

    def execute(self, sql, params=None):
        self.executed.append((" ".join(sql.split()), params))

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, rows):
        self.cursor = FakeCursor(rows)

    def connect(self):
        factory = self

        class Conn:
            def cursor(self, dictionary=True):
                return factory.cursor

            def commit(self):
                pass

            def rollback(self):
                pass

            def close(self):
                pass

        return Conn()


def _template_query(template_id: int):
    factory = FakeConnectionFactory([{"id": 3}, {"id": 8}])
    ids = MySQLEmployeeRepository(factory).list_ids_using_template(template_id)
    sql, params = factory.cursor.executed[0]
    return ids, sql, params


def test_template_usage_binds_every_placeholder():
    ids, sql, params = _template_query(5)

    assert ids == [3, 8]
    assert sql.count("%s") == len(params)
    assert set(params) == {5}


def test_template_usage_matches_override_original_assignment():
    _, sql, _ = _template_query(5)

    assert "so.is_active=1" in sql
    assert "so.override_tz_id=%s" in sql
    assert "so.original_tz_id=%s" in sql


def test_template_usage_falls_back_to_department_outside_override_dates():
    _, sql, _ = _template_query(5)

    # Override with no recorded original: dates outside it resolve through slots 2..3, then the department.
    fallback = sql.split("so.original_tz_id IS NULL", 1)[1]
    assert "e.individual_tz_2 IS NULL AND e.individual_tz_3 IS NULL" in fallback
    assert "%s IN (ds.tz_id_1, ds.tz_id_2, ds.tz_id_3)" in fallback
