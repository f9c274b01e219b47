"""
Project catalog: ordered projects with attached image assets.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Sequence

from portfolio_api.assets import AssetKind, AssetStore, IncomingFile, StoredAsset
from portfolio_api.db import DbClient, ProjectImage, ProjectRecord
from portfolio_api.errors import NotFound
from portfolio_api.schemas import ProjectForm, validate_input

logger = logging.getLogger(__name__)


def _images_for(assets: Sequence[StoredAsset], alt_text: str) -> list[ProjectImage]:
    return [
        ProjectImage(
            filename=asset.filename,
            storage_path=asset.storage_path,
            alt_text=alt_text,
        )
        for asset in assets
    ]


def _apply_form(project: ProjectRecord, form: ProjectForm) -> None:
    # Full replace: fields missing from the form fall back to their defaults.
    project.title = form.title
    project.description = form.description
    project.long_description = form.longDescription
    project.technologies = list(form.technologies)
    project.live_url = form.liveUrl
    project.github_url = form.githubUrl
    project.demo_url = form.demoUrl
    project.featured = form.featured
    project.status = form.status
    project.order = form.order


class ProjectCatalog:
    def __init__(self, db: DbClient, assets: AssetStore):
        self.db = db
        self.assets = assets

    def list(self) -> list[ProjectRecord]:
        """Projects by ``order`` ascending, newest first within an order."""
        return self.db.list_projects()

    def get(self, project_id: str) -> ProjectRecord:
        project = self.db.get_project(project_id)
        if project is None:
            raise NotFound("Project not found")
        return project

    def create(
        self, fields: Mapping[str, Any], images: Sequence[IncomingFile] = ()
    ) -> ProjectRecord:
        form = validate_input(ProjectForm, dict(fields))
        stored = self.assets.accept_batch(images, AssetKind.PROJECT_IMAGE)

        project = ProjectRecord(
            project_id=uuid.uuid4().hex,
            title=form.title,
            description=form.description,
        )
        _apply_form(project, form)
        project.images = _images_for(stored, form.title)
        try:
            created = self.db.create_project(project)
        except Exception:
            self.assets.release(stored)
            raise
        logger.info("Created project %s with %d images", created.project_id, len(stored))
        return created

    def update(
        self,
        project_id: str,
        fields: Mapping[str, Any],
        images: Sequence[IncomingFile] = (),
        replace_images: bool = False,
    ) -> ProjectRecord:
        """
        Replace the project's scalar fields and optionally its images.

        New images are appended unless ``replace_images`` is set, in which case
        the previous images are released once the record has been saved.
        """
        form = validate_input(ProjectForm, dict(fields))
        project = self.get(project_id)
        _apply_form(project, form)

        stored = self.assets.accept_batch(images, AssetKind.PROJECT_IMAGE) if images else []
        previous: list[ProjectImage] = []
        if stored:
            new_images = _images_for(stored, form.title)
            if replace_images:
                previous = project.images
                project.images = new_images
            else:
                project.images = project.images + new_images

        try:
            saved = self.db.save_project(project)
        except Exception:
            self.assets.release(stored)
            raise

        if previous:
            failed = self.assets.release([image.as_asset() for image in previous])
            if failed:
                logger.warning(
                    "Project %s: %d replaced images left orphaned", project_id, len(failed)
                )
        return saved

    def delete(self, project_id: str) -> None:
        """
        Release the project's images, then delete the record.

        Image removal is best-effort and never blocks the delete.
        """
        project = self.get(project_id)
        failed = self.assets.release([image.as_asset() for image in project.images])
        if failed:
            logger.warning(
                "Project %s: %d images left orphaned on delete", project_id, len(failed)
            )
        if not self.db.delete_project(project_id):
            raise NotFound("Project not found")
        logger.info("Deleted project %s", project_id)
