import unittest

from portfolio_api.assets import AssetStore, IncomingFile
from portfolio_api.db import InMemoryDbClient
from portfolio_api.defaults import DEFAULT_PERSONAL_INFO
from portfolio_api.errors import InvalidFileType, NotFound, StorageInconsistency, ValidationError
from portfolio_api.profile import ProfileRepository, cv_download_name
from portfolio_api.storage import InMemoryStorageClient


def pdf(data=b"%PDF-1.4 resume"):
    return IncomingFile(filename="resume.pdf", content_type="application/pdf", data=data)


class ProfileRepositoryTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.repo = ProfileRepository(self.db, AssetStore(self.storage))

    def test_get_or_create_returns_singleton(self):
        self.assertIsNone(self.db.get_profile())
        first = self.repo.get_or_create()
        self.assertEqual(first.personal_info.name, DEFAULT_PERSONAL_INFO["name"])
        first.about_me = "changed locally"
        second = self.repo.get_or_create()
        self.assertEqual(second.created_at, first.created_at)
        self.assertNotEqual(second.about_me, "changed locally")

    def test_update_personal_info_merges_supplied_fields(self):
        self.repo.update_personal_info(
            {"name": "Ada Lovelace", "email": "ada@example.com", "role": "Engineer"}
        )
        profile = self.repo.update_personal_info(
            {"name": "Ada", "email": "ada@example.com", "tagline": None}
        )
        info = profile.personal_info
        self.assertEqual(info.name, "Ada")
        self.assertEqual(info.role, "Engineer")
        self.assertEqual(info.tagline, DEFAULT_PERSONAL_INFO["tagline"])
        self.assertEqual(self.db.get_profile().personal_info.name, "Ada")

    def test_update_personal_info_requires_name_and_valid_email(self):
        with self.assertRaises(ValidationError):
            self.repo.update_personal_info({"email": "ada@example.com"})
        with self.assertRaises(ValidationError) as ctx:
            self.repo.update_personal_info({"name": "Ada", "email": "not-an-email"})
        self.assertEqual(ctx.exception.errors[0]["field"], "email")
        with self.assertRaises(ValidationError):
            self.repo.update_personal_info(None)

    def test_update_about(self):
        profile = self.repo.update_about("  Builds things.  ")
        self.assertEqual(profile.about_me, "Builds things.")
        with self.assertRaises(ValidationError):
            self.repo.update_about("   ")
        with self.assertRaises(ValidationError):
            self.repo.update_about(None)

    def test_attach_cv_twice_keeps_one_reference(self):
        first = self.repo.attach_cv(pdf(b"first")).cv_file
        second = self.repo.attach_cv(pdf(b"second")).cv_file
        self.assertNotEqual(first.storage_path, second.storage_path)
        self.assertEqual(list(self.storage.stored_objects), [second.storage_path])
        self.assertEqual(self.storage.get_bytes(second.storage_path), b"second")
        self.assertEqual(self.db.get_profile().cv_file.storage_path, second.storage_path)

    def test_attach_cv_when_previous_file_is_gone(self):
        first = self.repo.attach_cv(pdf()).cv_file
        self.storage.delete(first.storage_path)
        second = self.repo.attach_cv(pdf()).cv_file
        self.assertTrue(self.storage.exists(second.storage_path))

    def test_attach_cv_rejects_non_pdf(self):
        image = IncomingFile(filename="me.png", content_type="image/png", data=b"x")
        with self.assertRaises(InvalidFileType):
            self.repo.attach_cv(image)
        self.assertIsNone(self.repo.get_or_create().cv_file)
        self.assertEqual(self.storage.stored_objects, {})

    def test_cv_status(self):
        self.assertEqual(
            self.repo.cv_status(), {"exists": False, "message": "No CV file in database"}
        )
        cv = self.repo.attach_cv(pdf()).cv_file
        status = self.repo.cv_status()
        self.assertTrue(status["exists"])
        self.assertEqual(status["filename"], cv.filename)
        self.assertEqual(status["message"], "File exists")

        self.storage.delete(cv.storage_path)
        status = self.repo.cv_status()
        self.assertFalse(status["exists"])
        self.assertEqual(status["message"], "File not found on disk")

    def test_open_cv_streams_under_owner_name(self):
        self.repo.update_personal_info({"name": "Ada  King Lovelace", "email": "ada@example.com"})
        self.repo.attach_cv(pdf(b"%PDF-1.4 body"))
        filename, stream = self.repo.open_cv()
        self.assertEqual(filename, "Ada_King_Lovelace_CV.pdf")
        self.assertEqual(stream.size, len(b"%PDF-1.4 body"))
        self.assertEqual(b"".join(stream.chunks), b"%PDF-1.4 body")

    def test_open_cv_without_cv(self):
        with self.assertRaises(NotFound):
            self.repo.open_cv()

    def test_open_cv_with_missing_bytes(self):
        cv = self.repo.attach_cv(pdf()).cv_file
        self.storage.delete(cv.storage_path)
        with self.assertRaises(StorageInconsistency):
            self.repo.open_cv()

    def test_cv_download_name(self):
        self.assertEqual(cv_download_name("Grace Hopper"), "Grace_Hopper_CV.pdf")
        self.assertEqual(cv_download_name(""), "Portfolio_CV.pdf")


if __name__ == "__main__":
    unittest.main()
