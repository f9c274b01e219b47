"""
Repository for the singleton profile record.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from portfolio_api.assets import AssetKind, AssetStore, AssetStream, IncomingFile, StoredAsset
from portfolio_api.db import CvFile, DbClient, ProfileRecord, to_iso
from portfolio_api.errors import NotFound
from portfolio_api.schemas import AboutUpdate, PersonalInfoUpdate, validate_input

logger = logging.getLogger(__name__)

# camelCase request keys -> PersonalInfo attributes
_PERSONAL_INFO_FIELDS = {
    "name": "name",
    "role": "role",
    "tagline": "tagline",
    "phone": "phone",
    "email": "email",
    "github": "github",
    "linkedin": "linkedin",
    "profileImage": "profile_image",
}


def cv_download_name(owner_name: str) -> str:
    base = re.sub(r"\s+", "_", (owner_name or "").strip()).replace('"', "")
    return f"{base or 'Portfolio'}_CV.pdf"


class ProfileRepository:
    """Reads and mutates the one profile record the site has."""

    def __init__(self, db: DbClient, assets: AssetStore):
        self.db = db
        self.assets = assets

    def get_or_create(self) -> ProfileRecord:
        return self.db.get_or_create_profile()

    def update_personal_info(self, changes: Mapping[str, Any]) -> ProfileRecord:
        """Merge the supplied personal-info fields; absent fields are kept."""
        update = validate_input(PersonalInfoUpdate, changes)
        profile = self.get_or_create()
        for key, value in update.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            setattr(profile.personal_info, _PERSONAL_INFO_FIELDS[key], str(value))
        return self.db.save_profile(profile)

    def update_about(self, text: Any) -> ProfileRecord:
        update = validate_input(AboutUpdate, {"aboutMe": text})
        profile = self.get_or_create()
        profile.about_me = update.aboutMe
        return self.db.save_profile(profile)

    def attach_cv(self, file: IncomingFile) -> ProfileRecord:
        """
        Store a new CV and point the profile at it.

        The old CV file is removed only after the new reference is saved.
        """
        profile = self.get_or_create()
        old = profile.cv_file.as_asset() if profile.cv_file else None
        saved: list[ProfileRecord] = []

        def _persist(asset: StoredAsset) -> None:
            profile.cv_file = CvFile(
                filename=asset.filename, storage_path=asset.storage_path
            )
            saved.append(self.db.save_profile(profile))

        self.assets.replace(old, file, AssetKind.CV, on_stored=_persist)
        if old is not None:
            logger.info("Replaced CV %s with %s", old.storage_path, profile.cv_file.storage_path)
        return saved[0]

    def cv_status(self) -> dict:
        profile = self.db.get_profile()
        if profile is None or profile.cv_file is None:
            return {"exists": False, "message": "No CV file in database"}

        cv = profile.cv_file
        exists = self.assets.exists(cv.as_asset())
        if not exists:
            logger.warning("CV %s is referenced but missing from storage", cv.storage_path)
        return {
            "exists": exists,
            "filePath": cv.storage_path,
            "filename": cv.filename,
            "uploadDate": to_iso(cv.upload_date),
            "message": "File exists" if exists else "File not found on disk",
        }

    def open_cv(self) -> tuple[str, AssetStream]:
        """Return the attachment filename and an open stream of the CV."""
        profile = self.db.get_profile()
        if profile is None or profile.cv_file is None:
            raise NotFound("CV not found")
        stream = self.assets.stream(profile.cv_file.as_asset())
        return cv_download_name(profile.personal_info.name), stream
