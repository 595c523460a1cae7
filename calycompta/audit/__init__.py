from .schemas import AuditActionEnum, AuditModuleEnum
from .service import AuditService

__all__ = ["AuditActionEnum", "AuditModuleEnum", "AuditService"]
