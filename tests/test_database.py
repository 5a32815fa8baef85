"""Tests for the database engine wrapper."""

import unittest
from datetime import UTC, datetime

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from designhub.core.database import Database
from designhub.models import Contest, Proposal, User


class TestSqliteForeignKeys(unittest.TestCase):
    def setUp(self) -> None:
        self.database = Database("sqlite://")
        self.database.create_all()
        self.addCleanup(self.database.dispose)

    def test_enforced_on_every_connection(self) -> None:
        with self.database.engine.connect() as conn:
            self.assertEqual(conn.execute(text("PRAGMA foreign_keys")).scalar(), 1)

    def test_deleting_a_contest_cascades_to_proposals(self) -> None:
        with self.database.session() as db:
            owner = User(email="o@example.com", password_hash="x", name="Owner")
            architect = User(email="a@example.com", password_hash="x", name="Arch")
            db.add_all([owner, architect])
            db.flush()
            contest = Contest(
                title="Loft",
                description="d",
                location="Milano",
                category="INTERIOR",
                budget=1.0,
                deadline=datetime.now(UTC),
                client_id=owner.id,
            )
            db.add(contest)
            db.flush()
            db.add(Proposal(contest_id=contest.id, architect_id=architect.id))
            db.commit()

            db.execute(text("DELETE FROM contests"))
            db.commit()
            self.assertEqual(db.query(Proposal).count(), 0)

    def test_dangling_reference_is_rejected(self) -> None:
        with self.database.engine.connect() as conn:
            with self.assertRaises(IntegrityError):
                conn.execute(
                    text(
                        "INSERT INTO notifications (user_id, type, title, message, read) "
                        "VALUES (999, 'X', 't', 'm', 0)"
                    )
                )


if __name__ == "__main__":
    unittest.main()
