"""디자인 스튜디오 클라이언트

업로드 → 생성 → 편집 → 저장 흐름을 API 서버와 Supabase 위에서 실행한다.
세션은 전역 상태가 아니라 sign_in()이 반환하는 Session 값을 매 호출에 넘긴다.
"""
import base64
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import requests
from PIL import Image, UnidentifiedImageError
from supabase import Client

from ..config import Settings, settings
from ..models.schemas import Design, ModelPreference, RecommendationResponse, UserRole
from ..utils.logger import logger
from .designs import DesignRepository
from .prompts import build_edit_instructions


@dataclass(frozen=True)
class Session:
    """인증된 사용자 컨텍스트"""
    access_token: str
    user_id: str
    email: Optional[str] = None
    role: Optional[UserRole] = None


@dataclass(frozen=True)
class GenerationOutcome:
    image: str
    design: Optional[Design] = None
    saved: bool = False


class StudioError(Exception):
    """API 호출 실패 (서버가 돌려준 상태 코드와 메시지)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DesignStudio:

    def __init__(
        self,
        supabase_client: Client,
        config: Settings = settings,
        http: Optional[requests.Session] = None,
    ):
        self.supabase = supabase_client
        self.config = config
        self.http = http or requests.Session()
        self.designs = DesignRepository(supabase_client)

    # ---- auth ---------------------------------------------------------

    def sign_up(self, email: str, password: str, full_name: str) -> None:
        """회원가입 (역할은 백엔드 트리거가 customer로 지정)"""
        self.supabase.auth.sign_up({
            "email": email,
            "password": password,
            "options": {"data": {"full_name": full_name}},
        })
        logger.info(f"Account created for {email}")

    def sign_in(self, email: str, password: str) -> Session:
        response = self.supabase.auth.sign_in_with_password({"email": email, "password": password})
        if response.session is None or response.user is None:
            raise StudioError("Sign in failed", status_code=401)

        self.designs.ensure_user_initialized()
        role = self.designs.get_user_role(response.user.id)
        logger.info(f"Signed in {email} as {role.value if role else 'unknown role'}")

        return Session(
            access_token=response.session.access_token,
            user_id=response.user.id,
            email=email,
            role=role,
        )

    def sign_out(self) -> None:
        self.supabase.auth.sign_out()

    # ---- upload -------------------------------------------------------

    def load_room_photo(self, path: str) -> str:
        """이미지 파일 → data URL (크기/형식 검증)"""
        file_path = Path(path)
        max_size = self.config.max_upload_size_mb * 1024 * 1024
        try:
            size = file_path.stat().st_size
        except OSError as e:
            raise ValueError(f"Image file not found: {path}") from e
        if size > max_size:
            raise ValueError(f"Please select an image under {self.config.max_upload_size_mb}MB")

        try:
            with Image.open(file_path) as image:
                image_format = image.format
                image.verify()
        except (UnidentifiedImageError, OSError) as e:
            raise ValueError(f"Not a valid image file: {file_path.name}") from e

        mime_type = Image.MIME.get(image_format, "image/jpeg")
        encoded = base64.b64encode(file_path.read_bytes()).decode()
        logger.info(f"Loaded room photo {file_path.name} ({size} bytes, {mime_type})")
        return f"data:{mime_type};base64,{encoded}"

    # ---- AI functions -------------------------------------------------

    def generate(
        self,
        session: Session,
        photo: str,
        style: str,
        room_type: str,
        description: Optional[str] = None,
        save: bool = True,
    ) -> GenerationOutcome:
        """디자인 생성 후 room_designs에 저장 (저장 실패는 saved=False)"""
        data = self._invoke(session, "generate-room-design", {
            "imageData": photo,
            "style": style,
            "roomType": room_type,
            "description": description or "",
        })
        image = data["image"]

        if not save:
            return GenerationOutcome(image=image)

        design = self.designs.save_generated_design(
            session.user_id, image, style, room_type, description
        )
        return GenerationOutcome(image=image, design=design, saved=design is not None)

    def edit(
        self,
        session: Session,
        image: str,
        instructions: Optional[str] = None,
        color_change: Optional[str] = None,
    ) -> str:
        edit_prompt = build_edit_instructions(instructions, color_change)
        data = self._invoke(session, "generate-room-design", {
            "imageData": image,
            "editMode": True,
            "editPrompt": edit_prompt,
        })
        return data["image"]

    def recommend(
        self,
        session: Session,
        room_type: str,
        style: str,
        budget: str,
        preferences: Optional[str] = None,
        model_preference: ModelPreference = ModelPreference.GEMINI,
    ) -> RecommendationResponse:
        data = self._invoke(session, "ai-design-recommendations", {
            "roomType": room_type,
            "style": style,
            "budget": budget,
            "preferences": preferences,
            "modelPreference": ModelPreference(model_preference).value,
        })
        return RecommendationResponse(**data)

    def _invoke(self, session: Session, function_name: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.config.api_base_url.rstrip('/')}/{function_name}"
        headers = {"Authorization": f"Bearer {session.access_token}"}
        if self.config.supabase_anon_key:
            headers["apikey"] = self.config.supabase_anon_key

        try:
            response = self.http.post(url, json=body, headers=headers,
                                      timeout=self.config.gateway_timeout_seconds)
        except requests.RequestException as e:
            raise StudioError(f"{function_name} request failed: {str(e)}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            message = data.get("error") if isinstance(data, dict) else None
            logger.error(f"{function_name} failed: {response.status_code} {message}")
            raise StudioError(message or f"HTTP {response.status_code}", status_code=response.status_code)

        return data
