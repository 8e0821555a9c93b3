# Schemas package for API request/response validation

# Base schemas
from .base import BaseSchema, TimestampSchema, IDSchema, BaseResponseSchema, OwnedResponseSchema, UpdateSchema

# User / auth schemas
from .user import (
    UserCreate, UserUpdate, SignupRequest, LoginRequest, AuthResponse, UserResponse
)

# Study organisation schemas
from .program import (
    ProgramCreate, ProgramUpdate, ProgramResponse,
    SubjectCreate, SubjectUpdate, SubjectResponse,
)
from .material import (
    TopicCreate, TopicUpdate, TopicResponse,
    MaterialCreate, MaterialUpdate, MaterialResponse, SignedUrlResponse,
)
from .agenda import (
    EventCreate, EventUpdate, EventResponse,
    ScheduleCreate, ScheduleUpdate, ScheduleResponse,
    GoalCreate, GoalUpdate, GoalResponse,
    StudySessionCreate, StudySessionUpdate, StudySessionResponse,
)

# Chat schemas
from .chat import (
    ChatMessageResponse, ChatSummary, ChatSessionResponse,
    StartSubjectChatRequest, SendMessageRequest, SendMessageResponse,
    GatewayStatusResponse, GatewayConfigUpdate,
)

# Export all schemas for easy importing
__all__ = [
    # Base
    "BaseSchema", "TimestampSchema", "IDSchema", "BaseResponseSchema", "OwnedResponseSchema", "UpdateSchema",

    # User
    "UserCreate", "UserUpdate", "SignupRequest", "LoginRequest", "AuthResponse", "UserResponse",

    # Programs / subjects
    "ProgramCreate", "ProgramUpdate", "ProgramResponse",
    "SubjectCreate", "SubjectUpdate", "SubjectResponse",

    # Topics / materials
    "TopicCreate", "TopicUpdate", "TopicResponse",
    "MaterialCreate", "MaterialUpdate", "MaterialResponse", "SignedUrlResponse",

    # Agenda
    "EventCreate", "EventUpdate", "EventResponse",
    "ScheduleCreate", "ScheduleUpdate", "ScheduleResponse",
    "GoalCreate", "GoalUpdate", "GoalResponse",
    "StudySessionCreate", "StudySessionUpdate", "StudySessionResponse",

    # Chat
    "ChatMessageResponse", "ChatSummary", "ChatSessionResponse",
    "StartSubjectChatRequest", "SendMessageRequest", "SendMessageResponse",
    "GatewayStatusResponse", "GatewayConfigUpdate",
]
