"""
Dashboard endpoint
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from techmate.api.v1.interventions import serialize_intervention
from techmate.core.database import get_db
from techmate.services.intervention_service import get_dashboard_stats

router = APIRouter()


@router.get("")
async def get_dashboard(db: Session = Depends(get_db)):
    """Open interventions, low stock parts, active technicians and latest activity"""
    stats = get_dashboard_stats(db)
    return {
        "open_interventions": stats["open_interventions"],
        "low_stock_parts": stats["low_stock_parts"],
        "active_technicians": stats["active_technicians"],
        "recent_interventions": [
            serialize_intervention(i).model_dump(mode="json") for i in stats["recent_interventions"]
        ],
    }
