"""
Machine and technician endpoints used by the intake pickers
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional, List, Dict, Any, Union
from datetime import datetime
from decimal import Decimal
import uuid

from techmate.core.database import get_db
from techmate.services.reference_service import (
    list_active_machines,
    list_active_technicians,
    get_machine_detail,
)

router = APIRouter()


class MachineSummary(BaseModel):
    id: uuid.UUID
    model: str
    location: Optional[str]
    display_name: str

    class Config:
        from_attributes = True


class TechnicianSummary(BaseModel):
    id: uuid.UUID
    name: str
    specialty: Optional[str]

    class Config:
        from_attributes = True


class PartSummary(BaseModel):
    id: uuid.UUID
    name: str
    stock_quantity: int
    min_stock_level: Optional[int]
    unit_price: Optional[Decimal]
    is_low_stock: bool

    class Config:
        from_attributes = True


class RecentIntervention(BaseModel):
    id: uuid.UUID
    status: str
    problem_description: Optional[str]
    created_at: datetime


class MachineDetailResponse(BaseModel):
    id: uuid.UUID
    model: str
    location: Optional[str]
    manual_pdf_url: Optional[str]
    image_url: Optional[str]
    is_active: bool
    specifications: Dict[str, Union[str, int, float]]
    created_at: datetime
    parts: List[PartSummary]
    recent_interventions: List[RecentIntervention]


@router.get("/machines", response_model=List[MachineSummary])
async def get_machines(db: Session = Depends(get_db)):
    """Active machines"""
    return list_active_machines(db)


@router.get("/machines/{machine_id}", response_model=MachineDetailResponse)
async def get_machine(machine_id: uuid.UUID, db: Session = Depends(get_db)):
    """Machine with compatible parts and its latest interventions"""
    detail = get_machine_detail(db, machine_id)
    if not detail:
        raise HTTPException(status_code=404, detail="Machine not found")

    machine = detail["machine"]
    return MachineDetailResponse(
        id=machine.id,
        model=machine.model,
        location=machine.location,
        manual_pdf_url=machine.manual_pdf_url,
        image_url=machine.image_url,
        is_active=machine.is_active,
        specifications=detail["specifications"],
        created_at=machine.created_at,
        parts=[PartSummary.model_validate(part) for part in detail["parts"]],
        recent_interventions=[
            RecentIntervention(
                id=i.id,
                status=i.status.value,
                problem_description=i.problem_description,
                created_at=i.created_at
            )
            for i in detail["recent_interventions"]
        ]
    )


@router.get("/technicians", response_model=List[TechnicianSummary])
async def get_technicians(db: Session = Depends(get_db)):
    """Active technicians"""
    return list_active_technicians(db)
