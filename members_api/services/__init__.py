"""Services module"""

from members_api.services.database_service import db_service

__all__ = ["db_service"]
