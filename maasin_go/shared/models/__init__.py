"""
Pydantic модели (DTO) сервисов.
"""

from maasin_go.shared.models.common import CamelModel, ErrorResponse, HealthStatus, parse_payload
from maasin_go.shared.models.driver_dto import (
    DriverRecord,
    DriverStatusUpdate,
    LocationDTO,
    PublishResponse,
    SnapshotResponse,
)
from maasin_go.shared.models.fare_dto import FareCatalog, FareEntry, FaresResponse
from maasin_go.shared.models.feedback_dto import FeedbackRecord, FeedbackRequest, FeedbackResponse
from maasin_go.shared.models.user_dto import (
    Identity,
    LoginRequest,
    ProfileDTO,
    ProfileResponse,
    ProfileUpdateResponse,
    SignupRequest,
    SignupResponse,
    TokenResponse,
    UpdateProfileRequest,
    UserDTO,
)

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "HealthStatus",
    "parse_payload",
    "DriverRecord",
    "DriverStatusUpdate",
    "LocationDTO",
    "PublishResponse",
    "SnapshotResponse",
    "FareCatalog",
    "FareEntry",
    "FaresResponse",
    "FeedbackRecord",
    "FeedbackRequest",
    "FeedbackResponse",
    "Identity",
    "LoginRequest",
    "ProfileDTO",
    "ProfileResponse",
    "ProfileUpdateResponse",
    "SignupRequest",
    "SignupResponse",
    "TokenResponse",
    "UpdateProfileRequest",
    "UserDTO",
]
