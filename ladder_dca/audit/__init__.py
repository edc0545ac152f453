"""
Audit log module recording every buy, sell, skip, error and system event.
"""

from .audit_log import AuditLog, last_traded_price
from .models import AuditAction, AuditEvent

__all__ = ["AuditLog", "AuditAction", "AuditEvent", "last_traded_price"]
