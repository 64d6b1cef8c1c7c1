"""
Services package for the Student Information System backend
"""

from .mongo_service import MongoService, mongo_service, get_mongo_service
from .eligibility_service import SchemeMatcher, get_scheme_matcher
from .llm_service import LLMService, LLMServiceError, get_llm_service
from .auth_service import (
    get_current_user,
    require_roles,
    create_access_token,
    get_password_hash,
    verify_password
)

__all__ = [
    "MongoService",
    "mongo_service",
    "get_mongo_service",
    "SchemeMatcher",
    "get_scheme_matcher",
    "LLMService",
    "LLMServiceError",
    "get_llm_service",
    "get_current_user",
    "require_roles",
    "create_access_token",
    "get_password_hash",
    "verify_password"
]
