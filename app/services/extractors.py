"""프로바이더별 응답 형태 → 정규화된 GatewayResponse

응답마다 variant 타입을 두고, to_envelope()에 mapper를 등록한다.
새 프로바이더는 variant 하나와 mapper 하나만 추가하면 된다.
"""
from dataclasses import dataclass
from functools import singledispatch
from typing import Any, Dict, Optional

from ..models.schemas import GatewayResponse
from .errors import ExtractionError

NO_IMAGE_MESSAGE = "No image generated from AI response"
NO_TEXT_MESSAGE = "No recommendation generated from AI response"


@dataclass(frozen=True)
class PrimaryImageReply:
    """AI Gateway chat completion (choices[0].message.images[0])"""
    body: Dict[str, Any]
    model: Optional[str] = None


@dataclass(frozen=True)
class FallbackImageReply:
    """이미지 편집 API 응답 (data[0].url 또는 data[0].b64_json)"""
    body: Dict[str, Any]
    model: Optional[str] = None


@dataclass(frozen=True)
class ChatTextReply:
    """텍스트 chat completion (choices[0].message.content)"""
    body: Dict[str, Any]
    model: Optional[str] = None


def _first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None


def _message(body: Dict[str, Any]) -> Dict[str, Any]:
    choice = _first(body.get("choices")) if isinstance(body, dict) else None
    if isinstance(choice, dict) and isinstance(choice.get("message"), dict):
        return choice["message"]
    return {}


@singledispatch
def to_envelope(reply: Any) -> GatewayResponse:
    raise TypeError(f"Unsupported provider reply: {type(reply).__name__}")


@to_envelope.register
def _(reply: PrimaryImageReply) -> GatewayResponse:
    image = _first(_message(reply.body).get("images"))
    url = None
    if isinstance(image, dict) and isinstance(image.get("image_url"), dict):
        url = image["image_url"].get("url")
    if not url:
        raise ExtractionError(NO_IMAGE_MESSAGE)
    return GatewayResponse(image=url, model=reply.model)


@to_envelope.register
def _(reply: FallbackImageReply) -> GatewayResponse:
    item = _first(reply.body.get("data")) if isinstance(reply.body, dict) else None
    if not isinstance(item, dict):
        raise ExtractionError(NO_IMAGE_MESSAGE)
    if item.get("url"):
        return GatewayResponse(image=item["url"], model=reply.model)
    if item.get("b64_json"):
        return GatewayResponse(image=f"data:image/png;base64,{item['b64_json']}", model=reply.model)
    raise ExtractionError(NO_IMAGE_MESSAGE)


@to_envelope.register
def _(reply: ChatTextReply) -> GatewayResponse:
    content = _message(reply.body).get("content")
    if not isinstance(content, str) or not content.strip():
        raise ExtractionError(NO_TEXT_MESSAGE)
    return GatewayResponse(recommendation=content, model=reply.model)
