import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from civic_intake.core.policy import Grant, Scope
from civic_intake.models.complaint import (
    Complaint,
    ComplaintMedia,
    ComplaintPriority,
    ComplaintStatus,
    DEFAULT_AI_SCORE,
)

logger = logging.getLogger(__name__)

COMPLAINT_NUMBER_PREFIX = "NCIP"
COMPLAINT_NUMBER_SUFFIX_LENGTH = 7
COMPLAINT_NUMBER_ALPHABET = string.ascii_uppercase + string.digits
# Attempts before a complaint number collision is reported as a failure
MAX_NUMBER_ATTEMPTS = 3


def generate_complaint_number(now: Optional[datetime] = None) -> str:
    """
    Human-facing complaint number: NCIP-<epoch millis>-<random suffix>.

    Collisions are improbable; the unique index on complaints.complaint_id
    catches the rest.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(COMPLAINT_NUMBER_ALPHABET) for _ in range(COMPLAINT_NUMBER_SUFFIX_LENGTH))
    return f"{COMPLAINT_NUMBER_PREFIX}-{millis}-{suffix}"


class ComplaintService:
    """Service for writing and reading complaints"""

    @staticmethod
    def create_complaint(
        db: Session,
        citizen_id: str,
        *,
        title: str,
        description: str,
        category_id: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        address: Optional[str] = None,
        media: Iterable[Mapping] = (),
    ) -> Complaint:
        """
        Insert a complaint and its media references in one transaction.

        Each media mapping carries url, file_type and mime_type. Either the
        complaint and every media row are committed, or nothing is.
        """
        media = list(media)

        for attempt in range(1, MAX_NUMBER_ATTEMPTS + 1):
            complaint_number = generate_complaint_number()
            complaint = Complaint(
                complaint_id=complaint_number,
                citizen_id=citizen_id,
                category_id=category_id,
                title=title,
                description=description,
                status=ComplaintStatus.SUBMITTED.value,
                priority=ComplaintPriority.MEDIUM.value,
                location_lat=latitude,
                location_lng=longitude,
                location_address=address,
                # Replaced once priority inference has run
                ai_priority_score=DEFAULT_AI_SCORE,
                ai_confidence=DEFAULT_AI_SCORE,
            )
            complaint.media = [
                ComplaintMedia(
                    file_url=item["url"],
                    file_type=item.get("file_type"),
                    mime_type=item.get("mime_type"),
                    uploaded_by=citizen_id,
                )
                for item in media
            ]
            db.add(complaint)

            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                if attempt == MAX_NUMBER_ATTEMPTS or not ComplaintService.complaint_number_exists(db, complaint_number):
                    raise
                logger.warning(f"Complaint number {complaint_number} already taken, retrying (attempt {attempt})")
                continue

            db.refresh(complaint)
            logger.info(
                f"Complaint {complaint.complaint_id} created by user {citizen_id} with {len(media)} media item(s)"
            )
            return complaint

    @staticmethod
    def complaint_number_exists(db: Session, complaint_number: str) -> bool:
        return db.query(Complaint.id).filter(Complaint.complaint_id == complaint_number).first() is not None

    @staticmethod
    def list_complaints(db: Session, grant: Grant, limit: int = 10, offset: int = 0) -> List[Complaint]:
        """
        Newest complaints first, narrowed by the caller's scope.

        Scope.OWN only returns complaints the caller submitted; Scope.ALL
        returns everything.
        """
        query = db.query(Complaint)
        if grant.scope is Scope.OWN:
            query = query.filter(Complaint.citizen_id == grant.user_id)

        return (
            query.order_by(Complaint.created_at.desc(), Complaint.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )


complaint_service = ComplaintService()
