from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from supplyvault.database.db import get_db
from supplyvault.schemas.alerts import AlertResponse
from supplyvault.services.alert_store import list_brand_alerts, mark_alert_read
from typing import List

router = APIRouter()

@router.get("/brands/{brand_id}/alerts", response_model=List[AlertResponse])
def get_brand_alerts(
    brand_id: int,
    unread_only: bool = Query(False),
    limit: int = Query(500, ge=1, le=500),
    db: Session = Depends(get_db)
):
    """
    Lists a brand's expiry alerts sorted by most recent.
    """
    return list_brand_alerts(db, brand_id, unread_only=unread_only, limit=limit)

@router.post("/alerts/{alert_id}/read", response_model=AlertResponse)
def read_alert(alert_id: int, db: Session = Depends(get_db)):
    """
    Marks an alert as read.
    """
    alert = mark_alert_read(db, alert_id)
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alert
