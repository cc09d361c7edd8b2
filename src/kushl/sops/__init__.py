"""
Standard operating procedures per task category.
"""
from kushl.sops.models import SopCreate, SopUpdate, StandardOperatingProcedure
from kushl.sops.service import SOP_KEY, SopService

__all__ = ["SOP_KEY", "SopCreate", "SopService", "SopUpdate", "StandardOperatingProcedure"]
