"""Pydantic schemas for course endpoints."""

from datetime import datetime

from pydantic import BaseModel


class LectureResponse(BaseModel):
    id: int
    title: str
    description: str
    media_public_id: str | None
    media_secure_url: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class CourseResponse(BaseModel):
    id: int
    title: str
    description: str
    category: str
    created_by: str
    thumbnail_public_id: str | None
    thumbnail_secure_url: str | None
    number_of_lectures: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CourseDetailResponse(CourseResponse):
    lectures: list[LectureResponse]


class CourseUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    category: str | None = None
    created_by: str | None = None


class CourseListResponse(BaseModel):
    success: bool = True
    message: str
    courses: list[CourseResponse]


class CourseEnvelope(BaseModel):
    success: bool = True
    message: str
    course: CourseDetailResponse


class LectureListResponse(BaseModel):
    success: bool = True
    message: str
    lectures: list[LectureResponse]
