import base64
import binascii
import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

DATA_URL_PATTERN = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,")
BUDGET_PATTERN = re.compile(r"^\d+(\.\d+)?$")

MAX_DESCRIPTION_LENGTH = 500
MAX_EDIT_PROMPT_LENGTH = 300


class Style(str, Enum):
    """인테리어 스타일"""
    MODERN = "Modern"
    MINIMALIST = "Minimalist"
    SCANDINAVIAN = "Scandinavian"
    INDUSTRIAL = "Industrial"
    CONTEMPORARY = "Contemporary"
    TRADITIONAL = "Traditional"


class RoomType(str, Enum):
    """방 종류"""
    LIVING_ROOM = "Living Room"
    BEDROOM = "Bedroom"
    KITCHEN = "Kitchen"
    BATHROOM = "Bathroom"
    OFFICE = "Office"
    DINING_ROOM = "Dining Room"


class ModelPreference(str, Enum):
    GEMINI = "gemini"
    GEMINI_PRO = "gemini-pro"
    GPT = "gpt"
    GPT_PRO = "gpt-pro"


MODEL_MAP: Dict[ModelPreference, str] = {
    ModelPreference.GEMINI: "google/gemini-2.5-flash",
    ModelPreference.GEMINI_PRO: "google/gemini-2.5-pro",
    ModelPreference.GPT: "openai/gpt-5-mini",
    ModelPreference.GPT_PRO: "openai/gpt-5",
}


class UserRole(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


class DesignRequest(BaseModel):
    """디자인 생성/편집 요청 (/generate-room-design)"""

    model_config = ConfigDict(populate_by_name=True)

    image_data: str = Field(..., alias="imageData")
    style: Optional[Style] = None
    room_type: Optional[RoomType] = Field(None, alias="roomType")
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    edit_mode: bool = Field(False, alias="editMode")
    edit_prompt: Optional[str] = Field(None, alias="editPrompt", max_length=MAX_EDIT_PROMPT_LENGTH)

    @field_validator("image_data")
    @classmethod
    def check_data_url(cls, value: str) -> str:
        if not DATA_URL_PATTERN.match(value):
            raise ValueError("imageData must be a base64 image data URL")
        encoded = value.split(",", 1)[1]
        try:
            decoded = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("imageData must contain valid base64")
        if not decoded:
            raise ValueError("imageData must not be empty")
        return value

    @field_validator("description", "edit_prompt")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def check_mode_fields(self) -> "DesignRequest":
        if self.edit_mode:
            if not self.edit_prompt:
                raise ValueError("editPrompt is required when editMode is true")
        elif self.style is None or self.room_type is None:
            raise ValueError("style and roomType are required unless editMode is true")
        return self


class RecommendationRequest(BaseModel):
    """텍스트 추천 요청 (/ai-design-recommendations)"""

    model_config = ConfigDict(populate_by_name=True)

    room_type: str = Field(..., alias="roomType", min_length=1)
    style: str = Field(..., min_length=1)
    budget: str
    preferences: Optional[str] = None
    model_preference: ModelPreference = Field(ModelPreference.GEMINI, alias="modelPreference")

    @field_validator("budget", mode="before")
    @classmethod
    def check_budget(cls, value: Any) -> str:
        text = str(value).strip()
        if not BUDGET_PATTERN.match(text):
            raise ValueError("budget must be a non-negative number")
        return text

    @field_validator("model_preference", mode="before")
    @classmethod
    def default_unknown_model(cls, value: Any) -> Any:
        # 알 수 없는 값은 기본 모델로
        value = getattr(value, "value", value)
        if value not in {m.value for m in ModelPreference}:
            return ModelPreference.GEMINI
        return value

    @property
    def model_name(self) -> str:
        return MODEL_MAP[self.model_preference]


class GatewayResponse(BaseModel):
    """정규화된 응답 envelope (image / recommendation / error 중 하나)

    서비스 내부에서는 에러를 DesignServiceError 예외로 전달하므로 error는 비어 있다.
    error는 예외 핸들러가 만드는 응답 body와 같은 모양을 기술하기 위해 남겨 둔다.
    """
    image: Optional[str] = None
    recommendation: Optional[str] = None
    model: Optional[str] = None
    error: Optional[str] = None


class DesignResponse(BaseModel):
    image: str
    message: str = "Design generated successfully"


class RecommendationResponse(BaseModel):
    recommendation: str
    model: str


class Design(BaseModel):
    """room_designs 테이블 레코드"""
    id: Optional[str] = None
    user_id: str
    title: str
    description: Optional[str] = None
    style: Optional[str] = None
    room_type: Optional[str] = None
    price: Optional[int] = None
    image_url: Optional[str] = None
    ai_generated: bool = False
    is_featured: bool = False
    created_at: Optional[datetime] = None


def format_validation_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    """pydantic 에러를 [{field, message}] 목록으로 변환"""
    details = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "body"
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": field, "message": message})
    return details
