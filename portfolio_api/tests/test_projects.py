import unittest
from unittest.mock import patch

from portfolio_api.assets import AssetStore, IncomingFile
from portfolio_api.db import InMemoryDbClient, ProjectStatus
from portfolio_api.errors import NotFound, TooManyFiles, ValidationError
from portfolio_api.projects import ProjectCatalog
from portfolio_api.storage import InMemoryStorageClient


def image(name="shot.png", data=b"\x89PNG"):
    return IncomingFile(filename=name, content_type="image/png", data=data)


def fields(**overrides):
    base = {"title": "Portfolio Site", "description": "A personal website"}
    base.update(overrides)
    return base


class ProjectCatalogTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.catalog = ProjectCatalog(self.db, AssetStore(self.storage))

    def test_list_orders_by_order_ascending(self):
        for order in ("2", "0", "1"):
            self.catalog.create(fields(title=f"Project {order}", order=order))
        self.assertEqual([p.order for p in self.catalog.list()], [0, 1, 2])

    def test_list_puts_newest_first_within_an_order(self):
        older = self.catalog.create(fields(title="Older"))
        newer = self.catalog.create(fields(title="Newer"))
        self.db.projects[older.project_id].created_at = 100.0
        self.db.projects[newer.project_id].created_at = 200.0
        self.assertEqual([p.title for p in self.catalog.list()], ["Newer", "Older"])

    def test_create_parses_form_fields(self):
        project = self.catalog.create(
            fields(
                technologies=" React , FastAPI,,React",
                featured="true",
                order="abc",
                status="",
                liveUrl="https://example.com",
            )
        )
        self.assertEqual(project.technologies, ["React", "FastAPI"])
        self.assertTrue(project.featured)
        self.assertEqual(project.order, 0)
        self.assertEqual(project.status, ProjectStatus.COMPLETED)
        self.assertEqual(project.long_description, "")
        self.assertEqual(project.live_url, "https://example.com")

        planned = self.catalog.create(fields(status="planned", featured="0", order="3"))
        self.assertEqual(planned.status, ProjectStatus.PLANNED)
        self.assertFalse(planned.featured)
        self.assertEqual(planned.order, 3)

    def test_order_uses_leading_integer(self):
        for raw, expected in (("2.5", 2), ("3abc", 3), (" -1", -1), ("abc", 0), (4, 4)):
            project = self.catalog.create(fields(order=raw))
            self.assertEqual(project.order, expected, raw)

    def test_create_validates_lengths(self):
        for bad in (
            fields(title=""),
            fields(title="x" * 201),
            fields(description="x" * 501),
            {"description": "No title"},
        ):
            with self.assertRaises(ValidationError):
                self.catalog.create(bad)
        self.catalog.create(fields(title="x" * 200, description="y" * 500))

    def test_create_rejects_unknown_status(self):
        with self.assertRaises(ValidationError) as ctx:
            self.catalog.create(fields(status="archived"))
        self.assertEqual(ctx.exception.errors[0]["field"], "status")

    def test_create_attaches_images(self):
        project = self.catalog.create(fields(), [image("a.png"), image("b.jpg")])
        self.assertEqual(len(project.images), 2)
        for img in project.images:
            self.assertEqual(img.alt_text, "Portfolio Site")
            self.assertTrue(img.storage_path.startswith("projects/"))
            self.assertTrue(self.storage.exists(img.storage_path))

    def test_create_rejects_too_many_images(self):
        with self.assertRaises(TooManyFiles):
            self.catalog.create(fields(), [image() for _ in range(6)])
        self.assertEqual(self.storage.stored_objects, {})
        self.assertEqual(self.db.count_projects(), 0)

    def test_invalid_fields_store_no_images(self):
        with self.assertRaises(ValidationError):
            self.catalog.create(fields(title=""), [image()])
        self.assertEqual(self.storage.stored_objects, {})

    def test_get_missing_project(self):
        with self.assertRaises(NotFound):
            self.catalog.get("missing")

    def test_update_replaces_images(self):
        project = self.catalog.create(fields(), [image(), image()])
        old_paths = [img.storage_path for img in project.images]
        updated = self.catalog.update(
            project.project_id, fields(), [image(), image()], replace_images=True
        )
        new_paths = [img.storage_path for img in updated.images]
        self.assertEqual(len(new_paths), 2)
        self.assertFalse(set(old_paths) & set(new_paths))
        self.assertEqual(sorted(self.storage.stored_objects), sorted(new_paths))

    def test_update_appends_images_by_default(self):
        project = self.catalog.create(fields(), [image()])
        original = project.images[0].storage_path
        updated = self.catalog.update(project.project_id, fields(), [image(), image()])
        self.assertEqual(len(updated.images), 3)
        self.assertEqual(updated.images[0].storage_path, original)
        self.assertEqual(len(self.storage.stored_objects), 3)

    def test_update_without_images_keeps_existing(self):
        project = self.catalog.create(fields(), [image()])
        updated = self.catalog.update(
            project.project_id, fields(title="Renamed"), replace_images=True
        )
        self.assertEqual(updated.title, "Renamed")
        self.assertEqual(updated.images, project.images)

    def test_update_overwrites_omitted_fields(self):
        project = self.catalog.create(
            fields(liveUrl="https://example.com", technologies="Python", featured="on")
        )
        updated = self.catalog.update(project.project_id, fields())
        self.assertEqual(updated.live_url, "")
        self.assertEqual(updated.technologies, [])
        self.assertFalse(updated.featured)

    def test_update_missing_project_stores_nothing(self):
        with self.assertRaises(NotFound):
            self.catalog.update("missing", fields(), [image()])
        self.assertEqual(self.storage.stored_objects, {})

    def test_delete_removes_images_and_record(self):
        project = self.catalog.create(fields(), [image(), image(), image()])
        self.catalog.delete(project.project_id)
        self.assertEqual(self.storage.stored_objects, {})
        with self.assertRaises(NotFound):
            self.catalog.get(project.project_id)
        with self.assertRaises(NotFound):
            self.catalog.delete(project.project_id)

    def test_delete_tolerates_missing_image_files(self):
        project = self.catalog.create(fields(), [image(), image()])
        self.storage.delete(project.images[0].storage_path)
        self.catalog.delete(project.project_id)
        self.assertEqual(self.storage.stored_objects, {})
        self.assertEqual(self.db.count_projects(), 0)

    def test_delete_proceeds_when_image_removal_fails(self):
        project = self.catalog.create(fields(), [image()])
        with patch.object(self.storage, "delete", side_effect=OSError("read-only")):
            with self.assertLogs("portfolio_api.projects", level="WARNING"):
                self.catalog.delete(project.project_id)
        self.assertEqual(self.db.count_projects(), 0)


if __name__ == "__main__":
    unittest.main()
