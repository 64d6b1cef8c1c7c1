"""
API routes for the Student Information System
"""

from .auth import router as auth_router
from .users import router as users_router
from .students import router as students_router
from .teachers import router as teachers_router
from .institutions import router as institutions_router
from .schemes import router as schemes_router
from .chat import router as chat_router
from .dashboard import router as dashboard_router

__all__ = [
    "auth_router",
    "users_router",
    "students_router",
    "teachers_router",
    "institutions_router",
    "schemes_router",
    "chat_router",
    "dashboard_router"
]
