"""AI 생성 디자인 가격 산정 (단위: INR, 정수)"""

STYLE_MULTIPLIERS = {
    "Modern": 1.2,
    "Minimalist": 1.0,
    "Traditional": 1.1,
    "Industrial": 1.3,
    "Scandinavian": 1.2,
    "Contemporary": 1.4,
}

ROOM_BASE_PRICES = {
    "Living Room": 35000,
    "Bedroom": 28000,
    "Kitchen": 45000,
    "Bathroom": 25000,
    "Dining Room": 32000,
    "Office": 30000,
}

DEFAULT_MULTIPLIER = 1.0
DEFAULT_BASE_PRICE = 30000


def estimate_price(style: str, room_type: str) -> int:
    multiplier = STYLE_MULTIPLIERS.get(style, DEFAULT_MULTIPLIER)
    base_price = ROOM_BASE_PRICES.get(room_type, DEFAULT_BASE_PRICE)
    return round(base_price * multiplier)
