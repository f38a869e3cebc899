"""Course API endpoints."""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_current_user, require_admin
from app.schemas.auth import MessageResponse
from app.schemas.course import (
    CourseDetailResponse,
    CourseEnvelope,
    CourseListResponse,
    CourseResponse,
    CourseUpdateRequest,
    LectureListResponse,
    LectureResponse,
)
from app.services.course import CourseService, get_course_service
from app.services.media import IMAGE_EXTENSIONS, LECTURE_EXTENSIONS, MediaService, get_media_service

router = APIRouter(prefix="/api/v1/courses", tags=["Courses"])


@router.get("/", response_model=CourseListResponse)
def list_courses(
    db: Session = Depends(get_db),
    service: CourseService = Depends(get_course_service),
) -> CourseListResponse:
    """List all courses (without their lectures)."""
    courses = service.list_courses(db)
    return CourseListResponse(
        message="All courses fetched successfully",
        courses=[CourseResponse.model_validate(c) for c in courses],
    )


@router.post("/", response_model=CourseEnvelope, status_code=201)
def create_course(
    title: str | None = Form(None),
    description: str | None = Form(None),
    category: str | None = Form(None),
    created_by: str | None = Form(None),
    thumbnail: UploadFile | None = File(None),
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
    service: CourseService = Depends(get_course_service),
    media_service: MediaService = Depends(get_media_service),
) -> CourseEnvelope:
    """Create a course with an optional thumbnail image."""
    thumbnail_path = None
    if thumbnail is not None and thumbnail.filename:
        thumbnail_path = media_service.store_file(thumbnail, IMAGE_EXTENSIONS)
    try:
        course = service.create_course(db, title, description, category, created_by, thumbnail_path=thumbnail_path)
    finally:
        if thumbnail_path:
            media_service.remove_local_file(thumbnail_path)
    return CourseEnvelope(message="Course created successfully", course=CourseDetailResponse.model_validate(course))


@router.get("/{course_id}", response_model=LectureListResponse)
def get_lectures(
    course_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: CourseService = Depends(get_course_service),
) -> LectureListResponse:
    """List the lectures of a course."""
    course = service.get_course(db, course_id)
    return LectureListResponse(
        message="Course lectures fetched successfully",
        lectures=[LectureResponse.model_validate(lecture) for lecture in course.lectures],
    )


@router.put("/{course_id}", response_model=CourseEnvelope)
def update_course(
    course_id: int,
    body: CourseUpdateRequest,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
    service: CourseService = Depends(get_course_service),
) -> CourseEnvelope:
    """Update course fields."""
    course = service.update_course(db, course_id, **body.model_dump())
    return CourseEnvelope(message="Course updated successfully", course=CourseDetailResponse.model_validate(course))


@router.delete("/{course_id}", response_model=MessageResponse)
def delete_course(
    course_id: int,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
    service: CourseService = Depends(get_course_service),
) -> MessageResponse:
    """Delete a course and its lectures."""
    service.delete_course(db, course_id)
    return MessageResponse(message="Course deleted successfully")


@router.post("/{course_id}", response_model=CourseEnvelope)
def add_lecture(
    course_id: int,
    title: str | None = Form(None),
    description: str | None = Form(None),
    lecture: UploadFile | None = File(None),
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
    service: CourseService = Depends(get_course_service),
    media_service: MediaService = Depends(get_media_service),
) -> CourseEnvelope:
    """Add a lecture, with optional media, to a course."""
    media_path = None
    if lecture is not None and lecture.filename:
        media_path = media_service.store_file(lecture, LECTURE_EXTENSIONS)
    try:
        course = service.add_lecture(db, course_id, title, description, media_path=media_path)
    finally:
        if media_path:
            media_service.remove_local_file(media_path)
    return CourseEnvelope(
        message="Lecture successfully added to the course",
        course=CourseDetailResponse.model_validate(course),
    )
