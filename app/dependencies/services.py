from typing import Optional
from fastapi import Depends
from sqlalchemy.orm import Session
from ..config import get_settings
from ..database import get_db
from ..services.membership_service import MembershipService
from ..services.unit_service import UnitService
from ..services.task_service import TaskService
from ..services.media_storage import MediaStorage, get_optional_media_storage
from ..utils.email import EmailService

_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service


def get_membership_service(
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> MembershipService:
    return MembershipService(db, email_service=email_service)


def get_unit_service(
    db: Session = Depends(get_db),
    membership_service: MembershipService = Depends(get_membership_service),
    storage: Optional[MediaStorage] = Depends(get_optional_media_storage),
) -> UnitService:
    return UnitService(db, membership_service=membership_service, storage=storage)


def get_task_service(
    db: Session = Depends(get_db),
    membership_service: MembershipService = Depends(get_membership_service),
    storage: Optional[MediaStorage] = Depends(get_optional_media_storage),
) -> TaskService:
    settings = get_settings()
    return TaskService(
        db,
        membership_service=membership_service,
        storage=storage,
        complete_on_upload_request=settings.COMPLETE_ON_UPLOAD_REQUEST,
        upload_url_expires=settings.MEDIA_UPLOAD_URL_EXPIRES,
    )
