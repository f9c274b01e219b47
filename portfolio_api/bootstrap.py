"""
First-run seeding: admin credential, default profile, starter projects.

Each step is an idempotent find-or-create. They are not guarded against
several processes starting at once, which is fine for a single instance.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Iterable, Optional

from portfolio_api.auth import hash_password
from portfolio_api.config import Settings
from portfolio_api.db import (
    AdminRecord,
    DbClient,
    PersonalInfo,
    ProfileRecord,
    ProjectRecord,
    ProjectStatus,
    Skill,
)
from portfolio_api.defaults import (
    BASELINE_SKILLS,
    DEFAULT_ABOUT_ME,
    DEFAULT_PERSONAL_INFO,
    SAMPLE_PROJECTS,
)

logger = logging.getLogger(__name__)


def baseline_profile() -> ProfileRecord:
    return ProfileRecord(
        personal_info=PersonalInfo(**DEFAULT_PERSONAL_INFO),
        about_me=DEFAULT_ABOUT_ME,
        skills=[Skill(**skill) for skill in BASELINE_SKILLS],
    )


def ensure_admin(db: DbClient, settings: Settings) -> bool:
    """Create the configured admin if missing. Returns True when created."""
    if db.get_admin(settings.admin_email):
        return False
    db.create_admin(
        AdminRecord(
            email=settings.admin_email,
            password_hash=hash_password(settings.admin_password),
        )
    )
    logger.info("Admin user %s created", settings.admin_email)
    return True


def ensure_profile(db: DbClient) -> ProfileRecord:
    existed = db.get_profile() is not None
    profile = db.get_or_create_profile(baseline_profile())
    if not existed:
        logger.info("Default portfolio data created")
    return profile


def seed_projects(db: DbClient, projects: Optional[Iterable[dict]] = None) -> int:
    """Insert the starter projects only when the catalog is empty."""
    if db.count_projects() > 0:
        logger.info("Projects already exist, skipping seed")
        return 0

    inserted = 0
    now = time.time()
    for data in SAMPLE_PROJECTS if projects is None else projects:
        fields = dict(data)
        fields["status"] = ProjectStatus(fields.get("status", ProjectStatus.COMPLETED))
        fields["technologies"] = list(fields.get("technologies", []))
        db.create_project(
            ProjectRecord(
                project_id=uuid.uuid4().hex,
                created_at=now,
                updated_at=now,
                **fields,
            )
        )
        inserted += 1
    logger.info("Seeded %d sample projects", inserted)
    return inserted


def run_bootstrap(db: DbClient, settings: Settings, *, seed: bool = True) -> None:
    ensure_admin(db, settings)
    ensure_profile(db)
    if seed:
        seed_projects(db)
