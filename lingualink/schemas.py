"""
Request bodies for the HTTP API.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

LANGUAGE_OPTIONS = [
    {"value": "en", "label": "English"},
    {"value": "es", "label": "Spanish"},
    {"value": "fr", "label": "French"},
    {"value": "de", "label": "German"},
    {"value": "it", "label": "Italian"},
    {"value": "pt", "label": "Portuguese"},
    {"value": "ru", "label": "Russian"},
    {"value": "zh", "label": "Mandarin"},
    {"value": "ja", "label": "Japanese"},
    {"value": "ko", "label": "Korean"},
    {"value": "ar", "label": "Arabic"},
    {"value": "hi", "label": "Hindi"},
]

PROFICIENCY_OPTIONS = [
    {"value": "beginner", "label": "Beginner"},
    {"value": "basic", "label": "Basic"},
    {"value": "intermediate", "label": "Intermediate"},
    {"value": "advanced", "label": "Advanced"},
    {"value": "fluent", "label": "Fluent"},
]

PROFICIENCY_VALUES = {option["value"] for option in PROFICIENCY_OPTIONS}


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Messaging

class SendMessageRequest(CamelModel):
    to: Optional[int] = None
    type: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)


# Users

class CreateUserRequest(CamelModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)
    email: str = Field(min_length=3, max_length=255)
    display_name: Optional[str] = Field(default=None, alias="displayName")
    bio: Optional[str] = None
    profile_picture: Optional[str] = Field(default=None, alias="profilePicture")
    native_language: str = Field(alias="nativeLanguage", min_length=2)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class UpdateUserRequest(CamelModel):
    username: Optional[str] = Field(default=None, min_length=1, max_length=100)
    password: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    bio: Optional[str] = None
    profile_picture: Optional[str] = Field(default=None, alias="profilePicture")
    native_language: Optional[str] = Field(default=None, alias="nativeLanguage")


class LoginRequest(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserLanguageRequest(CamelModel):
    language: str = Field(min_length=2)
    proficiency: str

    @field_validator("proficiency")
    @classmethod
    def validate_proficiency(cls, v):
        if v not in PROFICIENCY_VALUES:
            raise ValueError(f"Proficiency must be one of {sorted(PROFICIENCY_VALUES)}")
        return v


class UpdateUserLanguageRequest(CamelModel):
    language: Optional[str] = Field(default=None, min_length=2)
    proficiency: Optional[str] = None

    @field_validator("proficiency")
    @classmethod
    def validate_proficiency(cls, v):
        if v is not None and v not in PROFICIENCY_VALUES:
            raise ValueError(f"Proficiency must be one of {sorted(PROFICIENCY_VALUES)}")
        return v


# Calls

class CreateCallRequest(CamelModel):
    initiator_id: int = Field(alias="initiatorId")
    receiver_id: int = Field(alias="receiverId")
    initiator_language: str = Field(alias="initiatorLanguage")
    receiver_language: str = Field(alias="receiverLanguage")


class EndCallRequest(CamelModel):
    duration: Optional[Any] = None


# Translation and speech-to-text

class TranslateRequest(CamelModel):
    text: Optional[str] = None
    target_lang: Optional[str] = Field(default=None, alias="targetLang")
    source_lang: Optional[str] = Field(default=None, alias="sourceLang")


class SpeechToTextRequest(CamelModel):
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")
