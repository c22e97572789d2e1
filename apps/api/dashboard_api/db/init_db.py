from dashboard_api.db.base import Base
from dashboard_api.db.session import engine
from dashboard_api.models import AuditLog  # noqa: F401


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
