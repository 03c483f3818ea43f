import base64
import binascii
from io import BytesIO
from typing import Any, Dict, List, Optional, Tuple

import requests
from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import Settings, settings
from ..models.schemas import GatewayResponse
from ..utils.logger import logger
from .errors import (
    ConfigurationError,
    UpstreamGatewayError,
    UpstreamPaymentRequired,
    UpstreamRateLimited,
)
from .extractors import ChatTextReply, FallbackImageReply, PrimaryImageReply, to_envelope

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
NO_FALLBACK_MESSAGE = "AI credits exhausted and no fallback configured. Please add credits to continue."

# 이미지 편집 API의 prompt 최대 길이
FALLBACK_PROMPT_LIMIT = 1000


def decode_data_url(image_data: str) -> Tuple[str, bytes]:
    """data:image/...;base64,XXXX → (mime type, raw bytes)"""
    try:
        header, encoded = image_data.split(",", 1)
        mime_type = header[len("data:"):].split(";", 1)[0]
        return mime_type, base64.b64decode(encoded, validate=True)
    except (ValueError, binascii.Error) as e:
        raise UpstreamGatewayError(f"Invalid image data: {str(e)}")


def to_square_png(raw: bytes, size: str) -> bytes:
    """이미지 편집 API 입력 형식(정사각형 RGBA PNG)으로 변환"""
    width, _, height = size.partition("x")
    image = Image.open(BytesIO(raw))
    image = ImageOps.fit(image.convert("RGBA"), (int(width), int(height or width)))

    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class GatewayClient:
    """AI Gateway 클라이언트 (402 시 보조 프로바이더로 1회 fallback)

    동기(blocking) 클라이언트이므로 라우트에서는 asyncio.to_thread로 호출한다.
    """

    def __init__(self, config: Settings = settings, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    # ---- public -------------------------------------------------------

    def generate_room_image(self, prompt: str, image_data: str) -> GatewayResponse:
        """프롬프트 + 방 사진 → 생성된 이미지 (data URL)"""
        payload = {
            "model": self.config.image_model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": image_data}},
                    ],
                }
            ],
            "modalities": ["image", "text"],
        }

        response = self._post_primary(payload)
        if response.status_code == 402:
            logger.warning("AI Gateway returned 402, trying fallback image provider")
            envelope = to_envelope(self._image_fallback(prompt, image_data))
            if envelope.image and envelope.image.startswith("http"):
                envelope.image = self._inline_image(envelope.image)
            return envelope

        self._raise_for_status(response, "AI Gateway error")
        logger.info("AI response received")
        return to_envelope(PrimaryImageReply(self._json(response), model=self.config.image_model))

    def generate_recommendation(self, system_prompt: str, user_prompt: str, model: str) -> GatewayResponse:
        """텍스트 디자인 추천"""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        logger.info(f"Using AI model: {model} for design recommendation")
        response = self._post_primary({"model": model, "messages": messages})
        if response.status_code == 402:
            logger.warning("AI Gateway returned 402, trying fallback text provider")
            return to_envelope(self._text_fallback(messages))

        self._raise_for_status(response, "AI gateway error")
        return to_envelope(ChatTextReply(self._json(response), model=model))

    # ---- primary ------------------------------------------------------

    def _post_primary(self, payload: Dict[str, Any]) -> requests.Response:
        if not self.config.lovable_api_key:
            logger.error("LOVABLE_API_KEY is not configured")
            raise ConfigurationError("AI service not configured")

        return self._send(
            self.config.ai_gateway_url,
            headers={"Authorization": f"Bearer {self.config.lovable_api_key}"},
            json=payload,
        )

    # ---- fallback -----------------------------------------------------

    def _fallback_headers(self) -> Dict[str, str]:
        if not self.config.openai_api_key:
            logger.error("Primary credits exhausted and OPENAI_API_KEY is not configured")
            raise UpstreamPaymentRequired(NO_FALLBACK_MESSAGE)
        return {"Authorization": f"Bearer {self.config.openai_api_key}"}

    def _image_fallback(self, prompt: str, image_data: str) -> FallbackImageReply:
        headers = self._fallback_headers()
        mime_type, raw = decode_data_url(image_data)
        try:
            upload = ("room.png", to_square_png(raw, self.config.fallback_image_size), "image/png")
        except (UnidentifiedImageError, OSError, ValueError) as e:
            # 변환할 수 없으면 원본 그대로 보내고 판단은 프로바이더에 맡긴다
            logger.warning(f"Could not convert image for fallback provider, sending as-is: {str(e)}")
            extension = mime_type.split("/", 1)[-1] or "png"
            upload = (f"room.{extension}", raw, mime_type or "image/png")

        response = self._send(
            self.config.fallback_image_url,
            headers=headers,
            files={"image": upload},
            data={
                "model": self.config.fallback_image_model,
                "prompt": prompt[:FALLBACK_PROMPT_LIMIT],
                "n": "1",
                "size": self.config.fallback_image_size,
                "response_format": "b64_json",
            },
        )
        self._raise_fallback(response)
        logger.info("Fallback image provider response received")
        return FallbackImageReply(self._json(response), model=self.config.fallback_image_model)

    def _text_fallback(self, messages: List[Dict[str, Any]]) -> ChatTextReply:
        headers = self._fallback_headers()
        model = self.config.fallback_text_model
        response = self._send(
            self.config.fallback_chat_url,
            headers=headers,
            json={"model": model, "messages": messages},
        )
        self._raise_fallback(response)
        logger.info("Fallback text provider response received")
        return ChatTextReply(self._json(response), model=model)

    def _inline_image(self, url: str) -> str:
        """보조 프로바이더가 준 임시 URL → data URL (URL은 곧 만료된다)"""
        try:
            response = self.session.get(url, timeout=self.config.gateway_timeout_seconds)
        except requests.RequestException as e:
            logger.error(f"Fallback image download failed: {type(e).__name__}: {str(e)}")
            raise UpstreamGatewayError(f"Could not download fallback image: {str(e)}")
        if not response.ok or not response.content:
            logger.error(f"Fallback image download failed: {response.status_code}")
            raise UpstreamGatewayError(
                f"Could not download fallback image: {response.status_code}",
                upstream_status=response.status_code,
                body=response.text,
            )

        mime_type = response.headers.get("Content-Type", "image/png").split(";", 1)[0].strip()
        if not mime_type.startswith("image/"):
            mime_type = "image/png"
        encoded = base64.b64encode(response.content).decode("ascii")
        return f"data:{mime_type};base64,{encoded}"

    # ---- helpers ------------------------------------------------------

    def _send(self, url: str, **kwargs: Any) -> requests.Response:
        try:
            return self.session.post(url, timeout=self.config.gateway_timeout_seconds, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {type(e).__name__}: {str(e)}")
            raise UpstreamGatewayError(f"AI Gateway request failed: {str(e)}")

    @staticmethod
    def _raise_for_status(response: requests.Response, label: str) -> None:
        if response.ok:
            return
        logger.error(f"{label}: {response.status_code} {response.text}")
        if response.status_code == 429:
            raise UpstreamRateLimited(RATE_LIMIT_MESSAGE)
        raise UpstreamGatewayError(
            f"{label}: {response.status_code} {response.text}",
            upstream_status=response.status_code,
            body=response.text,
        )

    @staticmethod
    def _raise_fallback(response: requests.Response) -> None:
        if response.ok:
            return
        logger.error(f"Fallback provider error: {response.status_code} {response.text}")
        raise UpstreamGatewayError(
            f"Fallback provider error: {response.status_code} {response.text}",
            upstream_status=response.status_code,
            body=response.text,
        )

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            raise UpstreamGatewayError("AI Gateway returned a non-JSON response",
                                       upstream_status=response.status_code,
                                       body=response.text)
        return body if isinstance(body, dict) else {}


# 싱글톤 인스턴스
_gateway_client = None


def get_gateway_client() -> GatewayClient:
    """GatewayClient 인스턴스 가져오기 (테스트에서는 dependency override)"""
    global _gateway_client
    if _gateway_client is None:
        _gateway_client = GatewayClient()
    return _gateway_client
