"""Course and lecture models."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.database import Base


class Course(Base):
    """A course with an optional thumbnail and an ordered list of lectures."""

    __tablename__ = "course"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(128), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(128), nullable=False)
    created_by = Column(String(128), nullable=False)
    thumbnail_public_id = Column(String(256), nullable=True)
    thumbnail_secure_url = Column(String(1024), nullable=True)
    number_of_lectures = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    lectures = relationship(
        "Lecture",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Lecture.id",
    )


class Lecture(Base):
    """A lecture belonging to a course, with optional uploaded media."""

    __tablename__ = "lecture"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("course.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(128), nullable=False)
    description = Column(Text, nullable=False)
    media_public_id = Column(String(256), nullable=True)
    media_secure_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    course = relationship("Course", back_populates="lectures")
