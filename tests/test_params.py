"""Unit tests for bind parameters and the result wrapper."""

import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from psycopg2 import OperationalError

from pooled_sql.errors import ErrorKind, ExecutionError, IllegalStateError
from pooled_sql.params import Param, ParamBinder, SqlType, type_name
from pooled_sql.result import Result


class TestParamBinder(unittest.TestCase):
    """Ordering and immutability of bindings."""

    def test_insertion_order_is_bind_order(self):
        binder = ParamBinder().append(1).append("Student1").append(18).append("CS").append(1)

        values = [param.value for param in binder.as_sequence()]
        self.assertEqual(values, [1, "Student1", 18, "CS", 1])
        self.assertEqual(len(binder), 5)

    def test_constructor_values_and_extend(self):
        binder = ParamBinder(1, "a").extend(2, "b")
        self.assertEqual([p.value for p in binder], [1, "a", 2, "b"])
        self.assertTrue(all(p.type_hint is None for p in binder))

    def test_typed_values_keep_their_hint(self):
        binder = ParamBinder().append_typed(SqlType.INTEGER, 3).append("x").append_typed("citext", "y")

        self.assertEqual(
            binder.as_sequence(),
            [Param(3, SqlType.INTEGER), Param("x"), Param("y", "citext")],
        )

    def test_frozen_binder_rejects_changes(self):
        binder = ParamBinder(1).freeze()

        self.assertTrue(binder.frozen)
        with self.assertRaises(IllegalStateError):
            binder.append(2)
        with self.assertRaises(IllegalStateError):
            binder.append_typed(SqlType.TEXT, "x")
        with self.assertRaises(IllegalStateError):
            binder.extend(3, 4)
        self.assertEqual(len(binder), 1)

    def test_as_sequence_returns_a_copy(self):
        binder = ParamBinder(1)
        snapshot = binder.as_sequence()
        snapshot.append(Param(2))
        self.assertEqual(len(binder), 1)

    def test_type_name(self):
        self.assertIsNone(type_name(None))
        self.assertEqual(type_name(SqlType.DOUBLE), "double precision")
        self.assertEqual(type_name("int4"), "int4")


class TestResult(unittest.TestCase):

    def test_success(self):
        result = Result.success(3)
        self.assertTrue(result.ok)
        self.assertFalse(result.failed)
        self.assertIsNone(result.kind)
        self.assertEqual(result.unwrap(), 3)
        self.assertEqual(result.value_or(0), 3)

    def test_zero_rowcount_is_still_truthy(self):
        self.assertTrue(Result.success(0))

    def test_failure(self):
        error = ExecutionError("Update execution failed", OperationalError("boom"))
        result = Result.failure(error)

        self.assertFalse(result)
        self.assertTrue(result.failed)
        self.assertEqual(result.kind, ErrorKind.EXECUTION_FAILED)
        self.assertEqual(result.value_or(-1), -1)
        with self.assertRaises(ExecutionError):
            result.unwrap()

    def test_failure_requires_error(self):
        with self.assertRaises(ValueError):
            Result.failure(None)

    def test_value_and_error_are_exclusive(self):
        with self.assertRaises(ValueError):
            Result(value=1, error=ExecutionError("x"))

    def test_error_message_includes_cause(self):
        error = ExecutionError("Update execution failed", OperationalError("server closed"))
        self.assertIn("OperationalError", str(error))
        self.assertIn("server closed", str(error))
        self.assertIsNone(error.pgcode)


if __name__ == "__main__":
    unittest.main()
