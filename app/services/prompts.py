"""프롬프트 생성 (순수 함수, 같은 입력이면 항상 같은 문자열)"""
from typing import Optional

RECOMMENDATION_SYSTEM_PROMPT = (
    "You are an expert interior designer AI assistant with years of experience in creating "
    "beautiful, functional spaces. Generate creative, practical, and personalized room design "
    "recommendations based on user preferences. Provide detailed suggestions including furniture, "
    "colors, materials, and layout ideas that can be implemented within the specified budget."
)


def build_design_prompt(
    style: Optional[str],
    room_type: Optional[str],
    description: Optional[str] = None,
    edit_mode: bool = False,
    edit_prompt: Optional[str] = None,
) -> str:
    """생성/편집 모드에 맞는 이미지 지시문"""
    if edit_mode and edit_prompt:
        return (
            f"Modify this room design: {edit_prompt}. "
            "Keep the overall room structure but apply the requested changes to colors, "
            "furniture sizes, or design elements. Make it look professional and realistic."
        )

    description_sentence = f"{description}. " if description else ""
    return (
        f"Transform this empty room into a beautifully designed {style} style {room_type}. "
        f"{description_sentence}"
        "Add appropriate furniture, decorations, lighting, and color scheme matching the "
        f"{style} aesthetic. Make it look professional and inviting."
    )


def build_recommendation_prompt(
    room_type: str,
    style: str,
    budget: str,
    preferences: Optional[str] = None,
) -> str:
    return f"""Generate a detailed interior design recommendation for:
- Room Type: {room_type}
- Style: {style}
- Budget: ${budget}
- Additional Preferences: {preferences or 'None'}

Provide a comprehensive design plan including:
1. Color palette (3-5 colors with specific color codes)
2. Key furniture pieces (5-7 items with estimated prices)
3. Materials and textures recommendations
4. Lighting suggestions (ambient, task, and accent)
5. Decor elements and accessories with shopping tips
6. Layout tips for optimal space utilization

Format the response as a detailed, actionable design plan that is practical and achievable within the budget."""


def build_edit_instructions(instructions: Optional[str] = None, color_change: Optional[str] = None) -> str:
    """색상 변경 + 자유 편집 지시를 하나의 editPrompt로 합침"""
    instructions = (instructions or "").strip()
    color_change = (color_change or "").strip()
    if not instructions and not color_change:
        raise ValueError("Describe what you'd like to change")

    prompt = ""
    if color_change:
        prompt = f"Change the colors to {color_change}. "
    return (prompt + instructions).strip()
