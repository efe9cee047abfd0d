"""Tests for the pool-facing gateway."""

import os
import sys
import unittest
from unittest.mock import MagicMock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from psycopg2 import InterfaceError, OperationalError
from psycopg2.pool import PoolError

from pooled_sql.batch import BatchExecutor
from pooled_sql.errors import AcquireError, ErrorKind, PrepareError
from pooled_sql.gateway import Gateway, ReleasePolicy
from pooled_sql.query import QueryExecutor
from tests.fakes import FakePool

SELECT_STUDENT = "SELECT id, name FROM student WHERE id = %s"


class TestGatewayOpen(unittest.TestCase):

    def setUp(self):
        self.pool = FakePool()
        self.gateway = Gateway(self.pool)

    def test_single_statement_enables_autocommit(self):
        handle = self.gateway.open_single_statement(SELECT_STUDENT)
        self.assertTrue(self.pool.acquired[0].autocommit)
        self.assertEqual(handle.query, SELECT_STUDENT)
        handle.close()

    def test_batch_statement_disables_autocommit(self):
        handle = self.gateway.open_batch_statement(SELECT_STUDENT)
        self.assertFalse(self.pool.acquired[0].autocommit)
        handle.close()

    def test_each_statement_gets_its_own_connection(self):
        first = self.gateway.open_single_statement(SELECT_STUDENT)
        second = self.gateway.open_single_statement(SELECT_STUDENT)
        self.assertEqual(len(self.pool.acquired), 2)
        first.close()
        second.close()
        self.assertEqual(self.pool.outstanding, 0)

    def test_acquire_failure_raises_acquire_error(self):
        self.pool.acquire_error = PoolError("connection pool exhausted")

        with self.assertRaises(AcquireError) as ctx:
            self.gateway.open_single_statement(SELECT_STUDENT)

        self.assertEqual(ctx.exception.kind, ErrorKind.POOL_EXHAUSTED)
        self.assertEqual(self.pool.evicted, [])

    def test_prepare_failure_evicts_immediately(self):
        self.pool.configure = lambda conn: setattr(conn, "cursor_error", InterfaceError("connection already closed"))

        with self.assertRaises(PrepareError):
            self.gateway.open_single_statement(SELECT_STUDENT)

        self.assertEqual(self.pool.evicted, self.pool.acquired)
        self.assertEqual(len(self.pool.acquired), 1)

    def test_autocommit_failure_counts_as_prepare_failure(self):
        self.pool.configure = lambda conn: setattr(conn, "autocommit_error", OperationalError("lost"))

        with self.assertRaises(PrepareError):
            self.gateway.open_batch_statement(SELECT_STUDENT)

        self.assertEqual(len(self.pool.evicted), 1)

    def test_non_driver_prepare_error_still_evicts(self):
        self.pool.configure = lambda conn: setattr(conn, "cursor_error", RuntimeError("unexpected"))

        with self.assertRaises(RuntimeError):
            self.gateway.open_single_statement(SELECT_STUDENT)

        self.assertEqual(len(self.pool.evicted), 1)

    def test_public_surface_builds_executors(self):
        self.assertIsInstance(self.gateway.open_query(SELECT_STUDENT), QueryExecutor)
        self.assertIsInstance(self.gateway.open_batch(SELECT_STUDENT), BatchExecutor)
        self.assertEqual(self.pool.acquired, [])


class TestGatewayRelease(unittest.TestCase):

    def test_release_errors_are_logged_not_raised(self):
        pool = MagicMock()
        pool.evict.side_effect = PoolError("trying to put unkeyed connection")
        gateway = Gateway(pool)

        with self.assertLogs("pooled_sql.gateway", level="ERROR") as logs:
            gateway.release(MagicMock(), failed=True)

        self.assertTrue(any("DB_CONNECTION_RELEASE_FAILED" in line for line in logs.output))

    def test_release_none_is_ignored(self):
        pool = MagicMock()
        Gateway(pool).release(None)
        pool.evict.assert_not_called()
        pool.release.assert_not_called()

    def test_release_policy_parsing(self):
        self.assertIs(ReleasePolicy.from_raw(None), ReleasePolicy.EVICT_ALWAYS)
        self.assertIs(ReleasePolicy.from_raw(" Return_On_Clean "), ReleasePolicy.RETURN_ON_CLEAN)
        with self.assertRaises(ValueError):
            ReleasePolicy.from_raw("sometimes")

    def test_close_closes_owned_pool_only(self):
        pool = FakePool()
        Gateway(pool, owns_pool=False).close()
        self.assertFalse(pool.closed)

        with Gateway(pool):
            pass
        self.assertTrue(pool.closed)

    def test_pool_stats_include_policy(self):
        pool = MagicMock()
        pool.get_pool_stats.return_value = {"status": "active", "minconn": 1, "maxconn": 4}

        stats = Gateway(pool, release_policy=ReleasePolicy.RETURN_ON_CLEAN).get_pool_stats()

        self.assertEqual(stats["status"], "active")
        self.assertEqual(stats["release_policy"], "return_on_clean")

    def test_gateway_requires_pool(self):
        with self.assertRaises(ValueError):
            Gateway(None)


if __name__ == "__main__":
    unittest.main()
