from dashboard_api.models.audit_log import AuditLog

__all__ = ["AuditLog"]
