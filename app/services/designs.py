"""Supabase 기반 디자인 저장소

room_designs / user_roles 테이블과 ensure_user_initialized RPC를 다룬다.
클라이언트는 호출하는 쪽에서 명시적으로 넘긴다 (세션마다 인증 상태가 다름).
"""
from typing import Any, Dict, List, Optional

from supabase import Client

from ..models.schemas import Design, UserRole
from ..utils.logger import logger
from .pricing import estimate_price

DESIGNS_TABLE = "room_designs"
ROLES_TABLE = "user_roles"


class DesignRepository:
    """room_designs CRUD + 역할 조회"""

    def __init__(self, client: Client):
        self.client = client

    def ensure_user_initialized(self) -> bool:
        """첫 로그인 시 role/profile 생성 (실패해도 진행)"""
        try:
            self.client.rpc("ensure_user_initialized").execute()
            return True
        except Exception as e:
            logger.warning(f"ensure_user_initialized failed: {str(e)}")
            return False

    def get_user_role(self, user_id: str) -> Optional[UserRole]:
        rows = (
            self.client.table(ROLES_TABLE)
            .select("role")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
            .data
        )
        if not rows:
            return None
        try:
            return UserRole(rows[0].get("role"))
        except ValueError:
            logger.warning(f"Unknown role for user {user_id}: {rows[0].get('role')}")
            return None

    def create_design(self, user_id: str, fields: Dict[str, Any]) -> Design:
        row = {**fields, "user_id": user_id}
        data = self.client.table(DESIGNS_TABLE).insert(row).execute().data
        return Design(**data[0])

    def update_design(self, design_id: str, fields: Dict[str, Any]) -> Design:
        data = self.client.table(DESIGNS_TABLE).update(fields).eq("id", design_id).execute().data
        if not data:
            raise LookupError(f"Design not found: {design_id}")
        return Design(**data[0])

    def set_featured(self, design_id: str, featured: bool = True) -> Design:
        return self.update_design(design_id, {"is_featured": featured})

    def delete_design(self, design_id: str) -> None:
        self.client.table(DESIGNS_TABLE).delete().eq("id", design_id).execute()

    def list_user_designs(self, user_id: str) -> List[Design]:
        rows = (
            self.client.table(DESIGNS_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
            .data
        )
        return [Design(**row) for row in rows]

    def list_featured_designs(self) -> List[Design]:
        rows = (
            self.client.table(DESIGNS_TABLE)
            .select("*")
            .eq("is_featured", True)
            .order("created_at", desc=True)
            .execute()
            .data
        )
        return [Design(**row) for row in rows]

    def save_generated_design(
        self,
        user_id: str,
        image_url: str,
        style: str,
        room_type: str,
        description: Optional[str] = None,
    ) -> Optional[Design]:
        """AI 생성 결과 저장 (best-effort: 실패 시 로그만 남기고 None)"""
        fields = {
            "title": f"AI {style} {room_type}",
            "description": description or f"AI-generated {style} style {room_type} design",
            "style": style,
            "room_type": room_type,
            "image_url": image_url,
            "ai_generated": True,
            "price": estimate_price(style, room_type),
        }
        try:
            design = self.create_design(user_id, fields)
            logger.info(f"Generated design saved: {design.id}")
            return design
        except Exception as e:
            logger.warning(f"Error saving design for user {user_id}: {str(e)}")
            return None
