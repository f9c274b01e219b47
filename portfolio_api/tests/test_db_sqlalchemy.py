import unittest

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from portfolio_api.db import (
    PROFILE_ROW_ID,
    AdminRecord,
    ContactRecord,
    ContactStatus,
    CvFile,
    ProfileRecord,
    ProfileRow,
    ProjectImage,
    ProjectRecord,
    ProjectStatus,
    Skill,
    SqlAlchemyDbClient,
)


class SqlAlchemyDbClientTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL client logic.
    """

    def setUp(self):
        self.db = SqlAlchemyDbClient("sqlite+pysqlite:///:memory:")

    def test_profile_is_a_singleton(self):
        self.assertIsNone(self.db.get_profile())
        first = self.db.get_or_create_profile(
            ProfileRecord(about_me="First", skills=[Skill(name="SQL", level=80)])
        )
        second = self.db.get_or_create_profile(ProfileRecord(about_me="Second"))
        self.assertEqual(second.about_me, "First")
        self.assertEqual(second.created_at, first.created_at)

        with self.db.Session() as session:
            count = session.scalar(select(func.count()).select_from(ProfileRow))
            self.assertEqual(count, 1)
            session.add(
                ProfileRow(
                    id=PROFILE_ROW_ID,
                    personal_info={},
                    about_me="",
                    skills=[],
                    created_at=0.0,
                    updated_at=0.0,
                )
            )
            with self.assertRaises(IntegrityError):
                session.commit()

    def test_profile_roundtrip(self):
        profile = self.db.get_or_create_profile()
        profile.personal_info.name = "Ada Lovelace"
        profile.skills = [Skill(name="Python", level=90)]
        profile.cv_file = CvFile(filename="cv-1-2.pdf", storage_path="cv/cv-1-2.pdf", upload_date=5.0)
        self.db.save_profile(profile)

        fetched = self.db.get_profile()
        self.assertEqual(fetched.personal_info.name, "Ada Lovelace")
        self.assertEqual(fetched.skills, [Skill(name="Python", level=90)])
        self.assertEqual(fetched.cv_file, profile.cv_file)

        fetched.cv_file = None
        self.assertIsNone(self.db.save_profile(fetched).cv_file)
        self.assertIsNone(self.db.get_profile().cv_file)

    def test_projects_are_ordered(self):
        for project_id, order, created_at in (
            ("a", 2, 1.0),
            ("b", 0, 1.0),
            ("c", 1, 1.0),
            ("d", 1, 2.0),
        ):
            self.db.create_project(
                ProjectRecord(
                    project_id=project_id,
                    title=project_id,
                    description="desc",
                    order=order,
                    created_at=created_at,
                )
            )
        self.assertEqual([p.project_id for p in self.db.list_projects()], ["b", "d", "c", "a"])
        self.assertEqual(self.db.count_projects(), 4)

    def test_project_save_and_delete(self):
        project = self.db.create_project(
            ProjectRecord(
                project_id="p1",
                title="Site",
                description="desc",
                technologies=["Python"],
                status=ProjectStatus.IN_PROGRESS,
            )
        )
        project.images = [ProjectImage(filename="a.png", storage_path="projects/a.png", alt_text="Site")]
        project.featured = True
        self.db.save_project(project)

        fetched = self.db.get_project("p1")
        self.assertEqual(fetched.images, project.images)
        self.assertTrue(fetched.featured)
        self.assertEqual(fetched.status, ProjectStatus.IN_PROGRESS)

        self.assertTrue(self.db.delete_project("p1"))
        self.assertFalse(self.db.delete_project("p1"))
        self.assertIsNone(self.db.get_project("p1"))

    def test_contacts(self):
        for i in range(3):
            self.db.create_contact(
                ContactRecord(
                    contact_id=f"c{i}",
                    name="Grace Hopper",
                    email="grace@example.com",
                    subject="Hello there",
                    message="Message body",
                    ip_address="10.0.0.1",
                    created_at=float(i),
                )
            )
        page = self.db.list_contacts(offset=1, limit=1)
        self.assertEqual([c.contact_id for c in page], ["c1"])
        self.assertEqual(self.db.count_contacts(), 3)

        updated = self.db.update_contact_status("c0", ContactStatus.REPLIED)
        self.assertEqual(updated.status, ContactStatus.REPLIED)
        self.assertIsNone(self.db.update_contact_status("missing", ContactStatus.READ))

        self.assertTrue(self.db.delete_contact("c0"))
        self.assertIsNone(self.db.get_contact("c0"))

    def test_admin_lookup_is_case_insensitive(self):
        self.db.create_admin(AdminRecord(email="Admin@Example.com", password_hash="hash"))
        admin = self.db.get_admin("ADMIN@example.com")
        self.assertEqual(admin.email, "admin@example.com")
        self.assertIsNone(self.db.get_admin("other@example.com"))


if __name__ == "__main__":
    unittest.main()
