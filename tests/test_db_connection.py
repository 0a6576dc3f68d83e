import unittest
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.database import check_db_connection


class TestDatabaseConnection(unittest.TestCase):
    def test_database_connection_success(self):
        """The health probe succeeds against the configured database."""
        self.assertTrue(check_db_connection())

    def test_database_connection_failure(self):
        with patch("app.database.engine") as engine:
            engine.connect.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
            self.assertFalse(check_db_connection())
