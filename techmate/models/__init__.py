"""
SQLAlchemy models
"""
from techmate.models.profile import Profile
from techmate.models.technician import Technician
from techmate.models.machine import Machine, Part
from techmate.models.intervention import Intervention, InterventionStatus, InterventionPriority

__all__ = [
    "Profile",
    "Technician",
    "Machine",
    "Part",
    "Intervention",
    "InterventionStatus",
    "InterventionPriority",
]
