"""DB session dependency (composition root)."""

from files_api.infrastructure.persistence.database import get_db

__all__ = ["get_db"]
