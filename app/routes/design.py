import asyncio
import json
from typing import Any, Dict, Type, TypeVar

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..models.schemas import (
    DesignRequest,
    DesignResponse,
    RecommendationRequest,
    RecommendationResponse,
    format_validation_errors,
)
from ..services.errors import AuthenticationError, ValidationError
from ..services.gateway import GatewayClient, get_gateway_client
from ..services.prompts import (
    RECOMMENDATION_SYSTEM_PROMPT,
    build_design_prompt,
    build_recommendation_prompt,
)
from ..utils.logger import logger

router = APIRouter(tags=["design"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

RequestModel = TypeVar("RequestModel", bound=BaseModel)


def cors_json(content: Dict[str, Any], status_code: int = 200) -> JSONResponse:
    """모든 응답에 동일한 CORS 헤더를 붙인다"""
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


def preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


def require_authorization(request: Request) -> None:
    if not request.headers.get("authorization"):
        logger.warning("Request without Authorization header rejected")
        raise AuthenticationError("Missing authorization header")


async def parse_body(request: Request, model: Type[RequestModel]) -> RequestModel:
    """JSON 파싱 → 모델 검증 (실패 시 400)"""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON body")

    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON body")

    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        details = format_validation_errors(e)
        logger.warning(f"Validation failed: {details}")
        raise ValidationError("Invalid request", details=details)


@router.options("/generate-room-design")
async def generate_room_design_preflight():
    return preflight()


@router.post("/generate-room-design")
async def generate_room_design(
    request: Request,
    gateway: GatewayClient = Depends(get_gateway_client),
):
    """방 사진 → AI 인테리어 이미지 (생성/편집 모드)"""
    require_authorization(request)
    design = await parse_body(request, DesignRequest)

    prompt = build_design_prompt(
        style=design.style.value if design.style else None,
        room_type=design.room_type.value if design.room_type else None,
        description=design.description,
        edit_mode=design.edit_mode,
        edit_prompt=design.edit_prompt,
    )
    logger.info(f"Generating design with prompt: {prompt}")

    result = await asyncio.to_thread(gateway.generate_room_image, prompt, design.image_data)

    return cors_json(DesignResponse(image=result.image).model_dump())


@router.options("/ai-design-recommendations")
async def recommendations_preflight():
    return preflight()


@router.post("/ai-design-recommendations")
async def ai_design_recommendations(
    request: Request,
    gateway: GatewayClient = Depends(get_gateway_client),
):
    """예산/스타일 기반 텍스트 디자인 추천"""
    recommendation_request = await parse_body(request, RecommendationRequest)

    user_prompt = build_recommendation_prompt(
        room_type=recommendation_request.room_type,
        style=recommendation_request.style,
        budget=recommendation_request.budget,
        preferences=recommendation_request.preferences,
    )

    result = await asyncio.to_thread(
        gateway.generate_recommendation,
        RECOMMENDATION_SYSTEM_PROMPT,
        user_prompt,
        recommendation_request.model_name,
    )
    logger.info("Successfully generated AI recommendation")

    return cors_json(RecommendationResponse(
        recommendation=result.recommendation,
        model=result.model or recommendation_request.model_name,
    ).model_dump())
