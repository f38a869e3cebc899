"""Course service for course and lecture CRUD."""

import logging
from pathlib import Path

from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.models.course import Course, Lecture
from app.services.media import MEDIA_FOLDER, MediaService, get_media_service

logger = logging.getLogger("lms")


class CourseService:
    """Handles courses, their thumbnails and their lectures."""

    def __init__(self, media_service: MediaService | None = None) -> None:
        self.media_service = media_service or get_media_service()

    def list_courses(self, db: Session) -> list[Course]:
        """All courses, newest first."""
        return db.query(Course).order_by(Course.created_at.desc(), Course.id.desc()).all()

    def get_course(self, db: Session, course_id: int) -> Course:
        course = db.query(Course).filter(Course.id == course_id).first()
        if not course:
            raise NotFoundError("Course not found")
        return course

    def create_course(
        self,
        db: Session,
        title: str,
        description: str,
        category: str,
        created_by: str,
        thumbnail_path: str | Path | None = None,
    ) -> Course:
        """Create a course, uploading its thumbnail first if one was given."""
        if not all(v and v.strip() for v in (title, description, category, created_by)):
            raise ValidationError("All fields are required")

        course = Course(
            title=title.strip(),
            description=description.strip(),
            category=category.strip(),
            created_by=created_by.strip(),
            number_of_lectures=0,
        )
        if thumbnail_path:
            result = self.media_service.upload(thumbnail_path, folder=MEDIA_FOLDER)
            course.thumbnail_public_id = result.public_id
            course.thumbnail_secure_url = result.secure_url

        db.add(course)
        db.commit()
        db.refresh(course)
        logger.info("Created course id=%s", course.id)
        return course

    def update_course(
        self,
        db: Session,
        course_id: int,
        title: str | None = None,
        description: str | None = None,
        category: str | None = None,
        created_by: str | None = None,
    ) -> Course:
        """Apply the non-empty fields to a course."""
        course = self.get_course(db, course_id)
        for field, value in (
            ("title", title),
            ("description", description),
            ("category", category),
            ("created_by", created_by),
        ):
            if value is not None and value.strip():
                setattr(course, field, value.strip())
        db.commit()
        db.refresh(course)
        return course

    def delete_course(self, db: Session, course_id: int) -> None:
        """Delete a course and its lectures."""
        course = self.get_course(db, course_id)
        db.delete(course)
        db.commit()
        logger.info("Deleted course id=%s", course_id)

    def add_lecture(
        self,
        db: Session,
        course_id: int,
        title: str,
        description: str,
        media_path: str | Path | None = None,
    ) -> Course:
        """Append a lecture to a course and keep the lecture count in sync."""
        if not (title and title.strip() and description and description.strip()):
            raise ValidationError("All fields are required")
        course = self.get_course(db, course_id)

        lecture = Lecture(title=title.strip(), description=description.strip())
        if media_path:
            result = self.media_service.upload(media_path, folder=MEDIA_FOLDER, resource_type="auto")
            lecture.media_public_id = result.public_id
            lecture.media_secure_url = result.secure_url

        course.lectures.append(lecture)
        course.number_of_lectures = len(course.lectures)
        db.commit()
        db.refresh(course)
        return course


_course_service: CourseService | None = None


def get_course_service() -> CourseService:
    """Get singleton course service instance."""
    global _course_service
    if _course_service is None:
        _course_service = CourseService()
    return _course_service
