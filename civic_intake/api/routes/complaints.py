from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from civic_intake.api.dependencies import get_db, require_permission
from civic_intake.api.schemas import CamelModel
from civic_intake.core.policy import Action, Grant
from civic_intake.services.complaint_service import complaint_service

router = APIRouter(prefix="/complaints", tags=["complaints"])


class MediaReference(CamelModel):
    """Already-uploaded file attached to a complaint"""
    url: str = Field(min_length=1)
    file_type: Optional[str] = Field(default=None, alias="type")
    mime_type: Optional[str] = None


class ComplaintCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category_id: str = Field(min_length=1)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    address: Optional[str] = None
    media: Optional[List[MediaReference]] = None

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("category_id", mode="before")
    @classmethod
    def accept_numeric_category(cls, value):
        # Catalog ids may be integers upstream; they are stored as opaque strings
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class ComplaintCreated(CamelModel):
    id: str
    complaint_id: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: datetime, _info):
        return value.isoformat() if value else None


class ComplaintCreatedResponse(BaseModel):
    complaint: ComplaintCreated


class ComplaintRecord(BaseModel):
    """Complaint row as stored"""
    id: str
    complaint_id: str
    citizen_id: str
    category_id: str
    title: str
    description: str
    # Free-form: the officer workflow owns the full set of values
    status: str
    priority: str
    location_lat: Optional[float]
    location_lng: Optional[float]
    location_address: Optional[str]
    ai_priority_score: float
    ai_confidence: float
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: datetime, _info):
        return value.isoformat() if value else None

    @field_serializer('updated_at')
    def serialize_updated_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class ComplaintListResponse(BaseModel):
    complaints: List[ComplaintRecord]


@router.post("", response_model=ComplaintCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    payload: ComplaintCreate,
    grant: Grant = Depends(require_permission(Action.CREATE_COMPLAINT)),
    db: Session = Depends(get_db)
):
    """Submit a complaint with optional location and media references"""
    complaint = complaint_service.create_complaint(
        db,
        grant.user_id,
        title=payload.title,
        description=payload.description,
        category_id=payload.category_id,
        latitude=payload.latitude,
        longitude=payload.longitude,
        address=payload.address or None,
        media=[item.model_dump() for item in payload.media or []],
    )
    return {"complaint": ComplaintCreated.model_validate(complaint)}


@router.get("", response_model=ComplaintListResponse)
async def list_complaints(
    limit: int = Query(10, ge=0),
    offset: int = Query(0, ge=0),
    grant: Grant = Depends(require_permission(Action.LIST_COMPLAINTS)),
    db: Session = Depends(get_db)
):
    """List complaints visible to the caller, newest first"""
    complaints = complaint_service.list_complaints(db, grant, limit=limit, offset=offset)
    return {"complaints": [ComplaintRecord.model_validate(complaint) for complaint in complaints]}
