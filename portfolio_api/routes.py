"""
HTTP routes for the portfolio API.
"""

from __future__ import annotations

import logging
import mimetypes
from typing import Any, Optional
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import StreamingResponse

from portfolio_api.assets import AssetKind, AssetStore, IncomingFile
from portfolio_api.auth import authenticate, create_access_token, require_admin
from portfolio_api.config import Settings, get_settings
from portfolio_api.contact import ContactInbox
from portfolio_api.db import AdminRecord, DbClient
from portfolio_api.dependencies import (
    get_asset_store,
    get_contact_inbox,
    get_db_client,
    get_profile_repository,
    get_project_catalog,
)
from portfolio_api.errors import MissingFile, TooManyFiles, Unauthorized
from portfolio_api.profile import ProfileRepository
from portfolio_api.projects import ProjectCatalog
from portfolio_api.schemas import (
    AdminResponse,
    ContactListResponse,
    ContactModel,
    ContactSubmitResponse,
    CvCheckResponse,
    CvUploadResponse,
    HealthResponse,
    LoginRequest,
    MessageResponse,
    PortfolioModel,
    PortfolioResponse,
    ProjectModel,
    StatusUpdate,
    TokenResponse,
    as_bool,
    parse_int,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _read_upload(upload: UploadFile, kind: AssetKind) -> IncomingFile:
    # Read one byte past the ceiling so oversized files are detected
    # without buffering the whole payload.
    limit = AssetStore.policy(kind).max_bytes
    data = upload.file.read(limit + 1)
    return IncomingFile(
        filename=upload.filename or "",
        content_type=upload.content_type,
        data=data,
    )


def _read_uploads(
    uploads: Optional[list[UploadFile]], kind: AssetKind
) -> list[IncomingFile]:
    uploads = [u for u in uploads or [] if u.filename]
    max_files = AssetStore.policy(kind).max_files
    if len(uploads) > max_files:
        raise TooManyFiles(f"At most {max_files} files per upload")
    return [_read_upload(upload, kind) for upload in uploads]


def _client_ip(request: Request, settings: Settings) -> Optional[str]:
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _attachment(filename: str) -> str:
    # Header values must be latin-1; non-ASCII names go in filename*.
    fallback = "".join(c if 32 <= ord(c) < 127 else "_" for c in filename)
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def _project_fields(**fields: Optional[str]) -> dict:
    return {key: value for key, value in fields.items() if value is not None}


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


# Auth


@router.post("/auth/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
):
    admin = authenticate(db, payload.email, payload.password)
    if admin is None:
        raise Unauthorized("Invalid credentials")
    return TokenResponse(access_token=create_access_token(admin, settings))


@router.get("/auth/me", response_model=AdminResponse)
def me(admin: AdminRecord = Depends(require_admin)):
    return AdminResponse(email=admin.email, role=admin.role)


# Portfolio


@router.get("/portfolio", response_model=PortfolioResponse)
def get_portfolio(
    profiles: ProfileRepository = Depends(get_profile_repository),
    catalog: ProjectCatalog = Depends(get_project_catalog),
):
    profile = profiles.get_or_create()
    return {
        "portfolio": profile.as_dict(),
        "projects": [project.as_dict() for project in catalog.list()],
    }


@router.put("/portfolio/personal-info", response_model=PortfolioModel)
def update_personal_info(
    payload: Any = Body(None),
    _: AdminRecord = Depends(require_admin),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    return profiles.update_personal_info(payload).as_dict()


@router.put("/portfolio/about", response_model=PortfolioModel)
def update_about(
    payload: Any = Body(None),
    _: AdminRecord = Depends(require_admin),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    text = payload.get("aboutMe") if isinstance(payload, dict) else None
    return profiles.update_about(text).as_dict()


@router.post("/portfolio/cv", response_model=CvUploadResponse)
def upload_cv(
    cv: Optional[UploadFile] = File(None),
    _: AdminRecord = Depends(require_admin),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    if cv is None or not cv.filename:
        raise MissingFile()
    profile = profiles.attach_cv(_read_upload(cv, AssetKind.CV))
    return {"message": "CV uploaded successfully", "cvFile": profile.cv_file.as_dict()}


@router.get("/portfolio/cv/check", response_model=CvCheckResponse)
def check_cv(profiles: ProfileRepository = Depends(get_profile_repository)):
    return profiles.cv_status()


@router.get("/portfolio/cv/download")
def download_cv(profiles: ProfileRepository = Depends(get_profile_repository)):
    filename, stream = profiles.open_cv()
    logger.info("Serving CV download as %s (%d bytes)", filename, stream.size)
    return StreamingResponse(
        stream.chunks,
        media_type="application/pdf",
        headers={
            "Content-Disposition": _attachment(filename),
            "Content-Length": str(stream.size),
        },
    )


# Projects


@router.get("/projects", response_model=list[ProjectModel])
def list_projects(catalog: ProjectCatalog = Depends(get_project_catalog)):
    return [project.as_dict() for project in catalog.list()]


@router.get("/projects/{project_id}", response_model=ProjectModel)
def get_project(project_id: str, catalog: ProjectCatalog = Depends(get_project_catalog)):
    return catalog.get(project_id).as_dict()


@router.post("/projects", response_model=ProjectModel, status_code=201)
def create_project(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    longDescription: Optional[str] = Form(None),
    technologies: Optional[str] = Form(None),
    liveUrl: Optional[str] = Form(None),
    githubUrl: Optional[str] = Form(None),
    demoUrl: Optional[str] = Form(None),
    featured: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    order: Optional[str] = Form(None),
    images: Optional[list[UploadFile]] = File(None),
    _: AdminRecord = Depends(require_admin),
    catalog: ProjectCatalog = Depends(get_project_catalog),
):
    fields = _project_fields(
        title=title,
        description=description,
        longDescription=longDescription,
        technologies=technologies,
        liveUrl=liveUrl,
        githubUrl=githubUrl,
        demoUrl=demoUrl,
        featured=featured,
        status=status,
        order=order,
    )
    uploads = _read_uploads(images, AssetKind.PROJECT_IMAGE)
    return catalog.create(fields, uploads).as_dict()


@router.put("/projects/{project_id}", response_model=ProjectModel)
def update_project(
    project_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    longDescription: Optional[str] = Form(None),
    technologies: Optional[str] = Form(None),
    liveUrl: Optional[str] = Form(None),
    githubUrl: Optional[str] = Form(None),
    demoUrl: Optional[str] = Form(None),
    featured: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    order: Optional[str] = Form(None),
    replaceImages: Optional[str] = Form(None),
    images: Optional[list[UploadFile]] = File(None),
    _: AdminRecord = Depends(require_admin),
    catalog: ProjectCatalog = Depends(get_project_catalog),
):
    fields = _project_fields(
        title=title,
        description=description,
        longDescription=longDescription,
        technologies=technologies,
        liveUrl=liveUrl,
        githubUrl=githubUrl,
        demoUrl=demoUrl,
        featured=featured,
        status=status,
        order=order,
    )
    uploads = _read_uploads(images, AssetKind.PROJECT_IMAGE)
    project = catalog.update(
        project_id, fields, uploads, replace_images=as_bool(replaceImages)
    )
    return project.as_dict()


@router.delete("/projects/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: str,
    _: AdminRecord = Depends(require_admin),
    catalog: ProjectCatalog = Depends(get_project_catalog),
):
    catalog.delete(project_id)
    return MessageResponse(message="Project deleted successfully")


@router.get("/uploads/projects/{filename}")
def serve_project_image(filename: str, assets: AssetStore = Depends(get_asset_store)):
    stream = assets.stream(assets.locate(AssetKind.PROJECT_IMAGE, filename))
    media_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return StreamingResponse(
        stream.chunks,
        media_type=media_type,
        headers={"Content-Length": str(stream.size)},
    )


# Contact


@router.post("/contact", response_model=ContactSubmitResponse)
def submit_contact(
    request: Request,
    payload: Any = Body(None),
    inbox: ContactInbox = Depends(get_contact_inbox),
    settings: Settings = Depends(get_settings),
):
    inbox.submit(payload if isinstance(payload, dict) else {}, _client_ip(request, settings))
    return ContactSubmitResponse(
        message="Thank you for your message! I will get back to you soon.",
        success=True,
    )


@router.get("/contact", response_model=ContactListResponse)
def list_contacts(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    _: AdminRecord = Depends(require_admin),
    inbox: ContactInbox = Depends(get_contact_inbox),
):
    page_size = min(parse_int(limit) or 10, 100)
    contacts, pagination = inbox.list(page=parse_int(page) or 1, page_size=page_size)
    return {
        "contacts": [contact.as_dict() for contact in contacts],
        "pagination": pagination,
    }


@router.put("/contact/{contact_id}/status", response_model=ContactModel)
def update_contact_status(
    contact_id: str,
    payload: StatusUpdate,
    _: AdminRecord = Depends(require_admin),
    inbox: ContactInbox = Depends(get_contact_inbox),
):
    return inbox.set_status(contact_id, payload.status).as_dict()


@router.delete("/contact/{contact_id}", response_model=MessageResponse)
def delete_contact(
    contact_id: str,
    _: AdminRecord = Depends(require_admin),
    inbox: ContactInbox = Depends(get_contact_inbox),
):
    inbox.delete(contact_id)
    return MessageResponse(message="Contact message deleted successfully")
