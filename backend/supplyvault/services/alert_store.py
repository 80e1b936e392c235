import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from supplyvault.models.enums import AlertType
from supplyvault.models.models import Alert

logger = logging.getLogger(__name__)


def _alert_type_value(alert_type: Union[AlertType, str]) -> str:
    return alert_type.value if isinstance(alert_type, AlertType) else str(alert_type)


def alert_exists(db: Session, certification_id: int, alert_type: Union[AlertType, str]) -> bool:
    existing = (
        db.query(Alert.id)
        .filter(
            Alert.certification_id == certification_id,
            Alert.alert_type == _alert_type_value(alert_type)
        )
        .first()
    )
    return existing is not None


def create_expiry_alert(
    db: Session,
    certification_id: int,
    brand_id: int,
    alert_type: Union[AlertType, str],
    sent_at: Optional[datetime] = None
) -> Optional[Alert]:
    """
    Insert one alert per (certification, alert type).
    Returns None when it already exists; the unique constraint decides, so
    overlapping runs cannot both create it.
    """
    alert = Alert(
        certification_id=certification_id,
        brand_id=brand_id,
        alert_type=_alert_type_value(alert_type),
        sent_at=sent_at or datetime.now(timezone.utc),
        is_read=False
    )
    try:
        db.add(alert)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(
            "alert already exists",
            extra={"certification_id": certification_id, "alert_type": _alert_type_value(alert_type)}
        )
        return None
    db.refresh(alert)
    return alert


def list_brand_alerts(db: Session, brand_id: int, unread_only: bool = False, limit: int = 500) -> List[Alert]:
    query = db.query(Alert).filter(Alert.brand_id == brand_id)
    if unread_only:
        query = query.filter(Alert.is_read.is_(False))
    return query.order_by(Alert.sent_at.desc(), Alert.id.desc()).limit(limit).all()


def mark_alert_read(db: Session, alert_id: int) -> Optional[Alert]:
    alert = db.query(Alert).filter(Alert.id == alert_id).first()
    if alert is None:
        return None
    alert.is_read = True
    db.add(alert)
    db.commit()
    db.refresh(alert)
    return alert
