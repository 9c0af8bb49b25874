import unittest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi import HTTPException

import models_bootstrap  # noqa: F401
from core.database import Base
from organization.models import Organization
from organization.service import get_organization, create_organization
from organization.schema import OrganizationCreate


class OrganizationServiceTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        # In-memory SQLite for speed & isolation
        cls.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(cls.engine)
        cls.SessionLocal = sessionmaker(bind=cls.engine, autoflush=False, future=True)

    @classmethod
    def tearDownClass(cls):
        cls.engine.dispose()

    def setUp(self):
        self.db = self.SessionLocal()

    def tearDown(self):
        # Clean tables between tests
        for tbl in reversed(Base.metadata.sorted_tables):
            self.db.execute(tbl.delete())
        self.db.commit()
        self.db.close()

    # ---------- Helpers ----------
    def _seed(self, name="Org A"):
        org = Organization(name=name)
        self.db.add(org)
        self.db.commit()
        self.db.refresh(org)
        return org

    # ---------- Tests ----------
    def test_create_ok(self):
        obj = create_organization(self.db, OrganizationCreate(name="Coffee Co"))
        self.assertIsInstance(obj.id, int)
        self.assertEqual(obj.name, "Coffee Co")
        self.assertIsNotNone(obj.created_at)

    def test_create_duplicate_name_409(self):
        self._seed(name="Dupe Inc")
        with self.assertRaises(HTTPException) as ctx:
            create_organization(self.db, OrganizationCreate(name="Dupe Inc"))
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.detail, "organization name already exists")

    def test_get_organization(self):
        org = self._seed(name="Target")
        got = get_organization(self.db, org.id)
        self.assertEqual(got.id, org.id)
        self.assertEqual(got.name, "Target")

    def test_get_organization_missing_returns_none(self):
        self.assertIsNone(get_organization(self.db, 424242))


if __name__ == "__main__":
    unittest.main()
