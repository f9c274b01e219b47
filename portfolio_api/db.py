"""
Database abstraction for SQLAlchemy and an in-memory test implementation.
"""

from __future__ import annotations

import copy
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Protocol

from dacite import Config, from_dict
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    Integer,
    String,
    Text,
    create_engine,
    func,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from portfolio_api.assets import StoredAsset
from portfolio_api.defaults import DEFAULT_ABOUT_ME, DEFAULT_PERSONAL_INFO

# The profile table holds at most this one row.
PROFILE_ROW_ID = 1


def _now() -> float:
    return time.time()


def to_iso(timestamp: Optional[float]) -> Optional[str]:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def _from_json(data_class, data: dict):
    """Hydrate a dataclass from a JSON column value; unknown keys are ignored."""
    return from_dict(data_class=data_class, data=data, config=Config(check_types=False))


class ProjectStatus(str, Enum):
    COMPLETED = "completed"
    IN_PROGRESS = "in-progress"
    PLANNED = "planned"


class ContactStatus(str, Enum):
    NEW = "new"
    READ = "read"
    REPLIED = "replied"


@dataclass
class PersonalInfo:
    name: str = DEFAULT_PERSONAL_INFO["name"]
    role: str = DEFAULT_PERSONAL_INFO["role"]
    tagline: str = DEFAULT_PERSONAL_INFO["tagline"]
    phone: str = DEFAULT_PERSONAL_INFO["phone"]
    email: str = DEFAULT_PERSONAL_INFO["email"]
    github: str = DEFAULT_PERSONAL_INFO["github"]
    linkedin: str = DEFAULT_PERSONAL_INFO["linkedin"]
    profile_image: str = DEFAULT_PERSONAL_INFO["profile_image"]

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "role": self.role,
            "tagline": self.tagline,
            "phone": self.phone,
            "email": self.email,
            "github": self.github,
            "linkedin": self.linkedin,
            "profileImage": self.profile_image,
        }


@dataclass
class Skill:
    name: str
    level: int

    def as_dict(self) -> dict:
        return {"name": self.name, "level": self.level}


@dataclass
class CvFile:
    filename: str
    storage_path: str
    upload_date: float = field(default_factory=_now)

    def as_asset(self) -> StoredAsset:
        return StoredAsset(filename=self.filename, storage_path=self.storage_path)

    def as_dict(self) -> dict:
        return {
            "filename": self.filename,
            "storagePath": self.storage_path,
            "uploadDate": to_iso(self.upload_date),
        }


@dataclass
class ProfileRecord:
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    about_me: str = DEFAULT_ABOUT_ME
    skills: list[Skill] = field(default_factory=list)
    cv_file: Optional[CvFile] = None
    created_at: float = field(default_factory=_now)
    updated_at: float = field(default_factory=_now)

    def as_dict(self) -> dict:
        return {
            "personalInfo": self.personal_info.as_dict(),
            "aboutMe": self.about_me,
            "skills": [skill.as_dict() for skill in self.skills],
            "cvFile": self.cv_file.as_dict() if self.cv_file else None,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }


@dataclass
class ProjectImage:
    filename: str
    storage_path: str
    alt_text: str = ""

    def as_asset(self) -> StoredAsset:
        return StoredAsset(filename=self.filename, storage_path=self.storage_path)

    def as_dict(self) -> dict:
        return {
            "filename": self.filename,
            "storagePath": self.storage_path,
            "altText": self.alt_text,
        }


@dataclass
class ProjectRecord:
    project_id: str
    title: str
    description: str
    long_description: str = ""
    technologies: list[str] = field(default_factory=list)
    images: list[ProjectImage] = field(default_factory=list)
    live_url: str = ""
    github_url: str = ""
    demo_url: str = ""
    featured: bool = False
    status: ProjectStatus = ProjectStatus.COMPLETED
    order: int = 0
    created_at: float = field(default_factory=_now)
    updated_at: float = field(default_factory=_now)

    def as_dict(self) -> dict:
        return {
            "id": self.project_id,
            "title": self.title,
            "description": self.description,
            "longDescription": self.long_description,
            "technologies": list(self.technologies),
            "images": [image.as_dict() for image in self.images],
            "liveUrl": self.live_url,
            "githubUrl": self.github_url,
            "demoUrl": self.demo_url,
            "featured": self.featured,
            "status": self.status.value,
            "order": self.order,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }


@dataclass
class ContactRecord:
    contact_id: str
    name: str
    email: str
    subject: str
    message: str
    ip_address: Optional[str] = None
    status: ContactStatus = ContactStatus.NEW
    created_at: float = field(default_factory=_now)

    def as_dict(self) -> dict:
        return {
            "id": self.contact_id,
            "name": self.name,
            "email": self.email,
            "subject": self.subject,
            "message": self.message,
            "ipAddress": self.ip_address,
            "status": self.status.value,
            "createdAt": to_iso(self.created_at),
        }


@dataclass
class AdminRecord:
    email: str
    password_hash: str
    role: str = "admin"
    created_at: float = field(default_factory=_now)


class DbClient(Protocol):
    """Interface for database access."""

    def get_profile(self) -> Optional[ProfileRecord]:
        ...

    def get_or_create_profile(
        self, default: Optional[ProfileRecord] = None
    ) -> ProfileRecord:
        ...

    def save_profile(self, profile: ProfileRecord) -> ProfileRecord:
        ...

    def list_projects(self) -> list[ProjectRecord]:
        ...

    def get_project(self, project_id: str) -> Optional[ProjectRecord]:
        ...

    def create_project(self, project: ProjectRecord) -> ProjectRecord:
        ...

    def save_project(self, project: ProjectRecord) -> ProjectRecord:
        ...

    def delete_project(self, project_id: str) -> bool:
        ...

    def count_projects(self) -> int:
        ...

    def create_contact(self, contact: ContactRecord) -> ContactRecord:
        ...

    def get_contact(self, contact_id: str) -> Optional[ContactRecord]:
        ...

    def list_contacts(self, offset: int = 0, limit: int = 10) -> list[ContactRecord]:
        ...

    def count_contacts(self) -> int:
        ...

    def update_contact_status(
        self, contact_id: str, status: ContactStatus
    ) -> Optional[ContactRecord]:
        ...

    def delete_contact(self, contact_id: str) -> bool:
        ...

    def get_admin(self, email: str) -> Optional[AdminRecord]:
        ...

    def create_admin(self, admin: AdminRecord) -> AdminRecord:
        ...


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.profile: Optional[ProfileRecord] = None
        self.projects: Dict[str, ProjectRecord] = {}
        self.contacts: Dict[str, ContactRecord] = {}
        self.admins: Dict[str, AdminRecord] = {}

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.profile = None
        self.projects.clear()
        self.contacts.clear()
        self.admins.clear()

    def get_profile(self) -> Optional[ProfileRecord]:
        return copy.deepcopy(self.profile)

    def get_or_create_profile(
        self, default: Optional[ProfileRecord] = None
    ) -> ProfileRecord:
        if self.profile is None:
            self.profile = copy.deepcopy(default) if default else ProfileRecord()
        return copy.deepcopy(self.profile)

    def save_profile(self, profile: ProfileRecord) -> ProfileRecord:
        profile.updated_at = _now()
        self.profile = copy.deepcopy(profile)
        return copy.deepcopy(profile)

    def list_projects(self) -> list[ProjectRecord]:
        ordered = sorted(
            self.projects.values(), key=lambda p: (p.order, -p.created_at)
        )
        return [copy.deepcopy(p) for p in ordered]

    def get_project(self, project_id: str) -> Optional[ProjectRecord]:
        return copy.deepcopy(self.projects.get(project_id))

    def create_project(self, project: ProjectRecord) -> ProjectRecord:
        self.projects[project.project_id] = copy.deepcopy(project)
        return copy.deepcopy(project)

    def save_project(self, project: ProjectRecord) -> ProjectRecord:
        project.updated_at = _now()
        self.projects[project.project_id] = copy.deepcopy(project)
        return copy.deepcopy(project)

    def delete_project(self, project_id: str) -> bool:
        return self.projects.pop(project_id, None) is not None

    def count_projects(self) -> int:
        return len(self.projects)

    def create_contact(self, contact: ContactRecord) -> ContactRecord:
        self.contacts[contact.contact_id] = copy.deepcopy(contact)
        return copy.deepcopy(contact)

    def get_contact(self, contact_id: str) -> Optional[ContactRecord]:
        return copy.deepcopy(self.contacts.get(contact_id))

    def list_contacts(self, offset: int = 0, limit: int = 10) -> list[ContactRecord]:
        ordered = sorted(
            self.contacts.values(), key=lambda c: c.created_at, reverse=True
        )
        return [copy.deepcopy(c) for c in ordered[offset : offset + limit]]

    def count_contacts(self) -> int:
        return len(self.contacts)

    def update_contact_status(
        self, contact_id: str, status: ContactStatus
    ) -> Optional[ContactRecord]:
        contact = self.contacts.get(contact_id)
        if not contact:
            return None
        contact.status = status
        return copy.deepcopy(contact)

    def delete_contact(self, contact_id: str) -> bool:
        return self.contacts.pop(contact_id, None) is not None

    def get_admin(self, email: str) -> Optional[AdminRecord]:
        return copy.deepcopy(self.admins.get(email.lower()))

    def create_admin(self, admin: AdminRecord) -> AdminRecord:
        admin.email = admin.email.lower()
        self.admins[admin.email] = copy.deepcopy(admin)
        return admin


class SqlAlchemyDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlAlchemyDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    # Row <-> record conversion

    def _to_profile(self, row: "ProfileRow") -> ProfileRecord:
        cv = row.cv_file
        return ProfileRecord(
            personal_info=_from_json(PersonalInfo, row.personal_info or {}),
            about_me=row.about_me,
            skills=[_from_json(Skill, skill) for skill in row.skills or []],
            cv_file=_from_json(CvFile, cv) if cv else None,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _apply_profile(self, row: "ProfileRow", profile: ProfileRecord) -> None:
        row.personal_info = asdict(profile.personal_info)
        row.about_me = profile.about_me
        row.skills = [asdict(skill) for skill in profile.skills]
        row.cv_file = asdict(profile.cv_file) if profile.cv_file else None
        row.created_at = profile.created_at
        row.updated_at = profile.updated_at

    def _to_project(self, row: "ProjectRow") -> ProjectRecord:
        return ProjectRecord(
            project_id=row.id,
            title=row.title,
            description=row.description,
            long_description=row.long_description or "",
            technologies=list(row.technologies or []),
            images=[_from_json(ProjectImage, image) for image in row.images or []],
            live_url=row.live_url or "",
            github_url=row.github_url or "",
            demo_url=row.demo_url or "",
            featured=bool(row.featured),
            status=ProjectStatus(row.status),
            order=row.order,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _apply_project(self, row: "ProjectRow", project: ProjectRecord) -> None:
        row.title = project.title
        row.description = project.description
        row.long_description = project.long_description
        row.technologies = list(project.technologies)
        row.images = [asdict(image) for image in project.images]
        row.live_url = project.live_url
        row.github_url = project.github_url
        row.demo_url = project.demo_url
        row.featured = project.featured
        row.status = project.status.value
        row.order = project.order
        row.created_at = project.created_at
        row.updated_at = project.updated_at

    def _to_contact(self, row: "ContactRow") -> ContactRecord:
        return ContactRecord(
            contact_id=row.id,
            name=row.name,
            email=row.email,
            subject=row.subject,
            message=row.message,
            ip_address=row.ip_address,
            status=ContactStatus(row.status),
            created_at=row.created_at,
        )

    # Profile

    def get_profile(self) -> Optional[ProfileRecord]:
        with self.Session() as session:
            row = session.get(ProfileRow, PROFILE_ROW_ID)
            return self._to_profile(row) if row else None

    def get_or_create_profile(
        self, default: Optional[ProfileRecord] = None
    ) -> ProfileRecord:
        with self.Session() as session:
            row = session.get(ProfileRow, PROFILE_ROW_ID)
            if row:
                return self._to_profile(row)
            profile = default or ProfileRecord()
            row = ProfileRow(id=PROFILE_ROW_ID)
            self._apply_profile(row, profile)
            session.add(row)
            try:
                session.commit()
            except IntegrityError:
                # Another request created the singleton first; use theirs.
                session.rollback()
                row = session.get(ProfileRow, PROFILE_ROW_ID)
                return self._to_profile(row)
            return self._to_profile(row)

    def save_profile(self, profile: ProfileRecord) -> ProfileRecord:
        profile.updated_at = _now()
        with self.Session() as session:
            row = session.get(ProfileRow, PROFILE_ROW_ID)
            if row is None:
                row = ProfileRow(id=PROFILE_ROW_ID)
                session.add(row)
            self._apply_profile(row, profile)
            session.commit()
            return self._to_profile(row)

    # Projects

    def list_projects(self) -> list[ProjectRecord]:
        with self.Session() as session:
            stmt = select(ProjectRow).order_by(
                ProjectRow.order.asc(), ProjectRow.created_at.desc()
            )
            return [self._to_project(row) for row in session.execute(stmt).scalars()]

    def get_project(self, project_id: str) -> Optional[ProjectRecord]:
        with self.Session() as session:
            row = session.get(ProjectRow, project_id)
            return self._to_project(row) if row else None

    def create_project(self, project: ProjectRecord) -> ProjectRecord:
        with self.Session() as session:
            row = ProjectRow(id=project.project_id)
            self._apply_project(row, project)
            session.add(row)
            session.commit()
            return self._to_project(row)

    def save_project(self, project: ProjectRecord) -> ProjectRecord:
        project.updated_at = _now()
        with self.Session() as session:
            row = session.get(ProjectRow, project.project_id)
            if row is None:
                row = ProjectRow(id=project.project_id)
                session.add(row)
            self._apply_project(row, project)
            session.commit()
            return self._to_project(row)

    def delete_project(self, project_id: str) -> bool:
        with self.Session() as session:
            row = session.get(ProjectRow, project_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def count_projects(self) -> int:
        with self.Session() as session:
            return session.scalar(select(func.count()).select_from(ProjectRow)) or 0

    # Contact messages

    def create_contact(self, contact: ContactRecord) -> ContactRecord:
        with self.Session() as session:
            row = ContactRow(
                id=contact.contact_id,
                name=contact.name,
                email=contact.email,
                subject=contact.subject,
                message=contact.message,
                ip_address=contact.ip_address,
                status=contact.status.value,
                created_at=contact.created_at,
            )
            session.add(row)
            session.commit()
            return self._to_contact(row)

    def get_contact(self, contact_id: str) -> Optional[ContactRecord]:
        with self.Session() as session:
            row = session.get(ContactRow, contact_id)
            return self._to_contact(row) if row else None

    def list_contacts(self, offset: int = 0, limit: int = 10) -> list[ContactRecord]:
        with self.Session() as session:
            stmt = (
                select(ContactRow)
                .order_by(ContactRow.created_at.desc())
                .offset(offset)
                .limit(limit)
            )
            return [self._to_contact(row) for row in session.execute(stmt).scalars()]

    def count_contacts(self) -> int:
        with self.Session() as session:
            return session.scalar(select(func.count()).select_from(ContactRow)) or 0

    def update_contact_status(
        self, contact_id: str, status: ContactStatus
    ) -> Optional[ContactRecord]:
        with self.Session() as session:
            row = session.get(ContactRow, contact_id)
            if not row:
                return None
            row.status = status.value
            session.commit()
            return self._to_contact(row)

    def delete_contact(self, contact_id: str) -> bool:
        with self.Session() as session:
            row = session.get(ContactRow, contact_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    # Admins

    def get_admin(self, email: str) -> Optional[AdminRecord]:
        with self.Session() as session:
            row = session.get(AdminRow, email.lower())
            if not row:
                return None
            return AdminRecord(
                email=row.email,
                password_hash=row.password_hash,
                role=row.role,
                created_at=row.created_at,
            )

    def create_admin(self, admin: AdminRecord) -> AdminRecord:
        admin.email = admin.email.lower()
        with self.Session() as session:
            session.add(
                AdminRow(
                    email=admin.email,
                    password_hash=admin.password_hash,
                    role=admin.role,
                    created_at=admin.created_at,
                )
            )
            session.commit()
        return admin


Base = declarative_base()


class ProfileRow(Base):
    __tablename__ = "profile"

    id = Column(Integer, primary_key=True, autoincrement=False)
    personal_info = Column(JSON, nullable=False)
    about_me = Column(Text, nullable=False, default="")
    skills = Column(JSON, nullable=False)
    cv_file = Column(JSON, nullable=True)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class ProjectRow(Base):
    __tablename__ = "projects"

    id = Column(String, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(String(500), nullable=False)
    long_description = Column(Text, nullable=False, default="")
    technologies = Column(JSON, nullable=False)
    images = Column(JSON, nullable=False)
    live_url = Column(String, nullable=False, default="")
    github_url = Column(String, nullable=False, default="")
    demo_url = Column(String, nullable=False, default="")
    featured = Column(Boolean, nullable=False, default=False)
    status = Column(String, nullable=False, default=ProjectStatus.COMPLETED.value)
    order = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(Float, nullable=False, index=True)
    updated_at = Column(Float, nullable=False)


class ContactRow(Base):
    __tablename__ = "contact_messages"

    id = Column(String, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String, nullable=False)
    subject = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    ip_address = Column(String, nullable=True)
    status = Column(String, nullable=False, default=ContactStatus.NEW.value, index=True)
    created_at = Column(Float, nullable=False, index=True)


class AdminRow(Base):
    __tablename__ = "admins"

    email = Column(String, primary_key=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="admin")
    created_at = Column(Float, nullable=False)
