"""
디자인 스튜디오 CLI

사용법:
    python studio_cli.py --email me@example.com --password secret \
        --photo room.jpg --style Modern --room-type "Living Room" \
        --edit "Make the sofa smaller" --color "warm beige"

설명:
    - Supabase로 로그인 후 방 사진을 업로드(data URL 변환)
    - /generate-room-design 호출 → room_designs에 저장
    - 편집 지시가 있으면 edit 모드로 한 번 더 호출
    - 결과 이미지를 --output 디렉토리에 PNG로 저장
"""

import argparse
import base64
import sys
import time
from pathlib import Path

from supabase import create_client

from app.config import settings
from app.models.schemas import ModelPreference, RoomType, Style
from app.services.studio import DesignStudio, StudioError


def save_data_url(data_url: str, path: Path) -> Path:
    """data URL 이미지를 파일로 저장"""
    _, encoded = data_url.split(",", 1)
    path.write_bytes(base64.b64decode(encoded))
    return path


def main():
    parser = argparse.ArgumentParser(description='AI 방 인테리어 디자인 스튜디오')
    parser.add_argument('--email', required=True, help='Supabase 계정 이메일')
    parser.add_argument('--password', required=True, help='Supabase 계정 비밀번호')
    parser.add_argument('--photo', help='방 사진 경로')
    parser.add_argument('--style', default=Style.MODERN.value, choices=[s.value for s in Style])
    parser.add_argument('--room-type', default=RoomType.LIVING_ROOM.value, choices=[r.value for r in RoomType])
    parser.add_argument('--description', default='', help='추가 요청 사항')
    parser.add_argument('--edit', default='', help='생성 후 적용할 편집 지시')
    parser.add_argument('--color', default='', help='생성 후 적용할 색상 변경')
    parser.add_argument('--budget', help='예산을 주면 텍스트 추천도 요청')
    parser.add_argument('--model', default=ModelPreference.GEMINI.value, choices=[m.value for m in ModelPreference])
    parser.add_argument('--output', default='output', help='결과 이미지 저장 디렉토리')

    args = parser.parse_args()

    studio = DesignStudio(create_client(settings.supabase_url, settings.supabase_anon_key))

    try:
        session = studio.sign_in(args.email, args.password)
        print(f"로그인: {session.email} ({session.role.value if session.role else 'role 없음'})")

        output_dir = Path(args.output)
        output_dir.mkdir(exist_ok=True)

        if args.photo:
            photo = studio.load_room_photo(args.photo)

            start_time = time.time()
            outcome = studio.generate(session, photo, args.style, args.room_type, args.description)
            print(f"디자인 생성 완료 ({time.time() - start_time:.2f}초)")
            print(f"저장: {'성공' if outcome.saved else '실패 (로그 확인)'}")
            print(f"이미지: {save_data_url(outcome.image, output_dir / 'design.png')}")

            if args.edit or args.color:
                edited = studio.edit(session, outcome.image, args.edit, args.color)
                print(f"편집 이미지: {save_data_url(edited, output_dir / 'design_edited.png')}")

        if args.budget:
            result = studio.recommend(session, args.room_type, args.style, args.budget,
                                      args.description or None, ModelPreference(args.model))
            print(f"\n[{result.model}]\n{result.recommendation}")

    except (StudioError, ValueError) as e:
        print(f"오류: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
