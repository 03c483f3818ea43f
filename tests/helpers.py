"""
Shared builders for fake upstream responses.
"""
import json

import requests


def make_response(status_code: int, body=None) -> requests.Response:
    """Build a real requests.Response with a JSON (or raw text) body."""
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    if isinstance(body, str):
        response._content = body.encode()
    else:
        response._content = json.dumps(body if body is not None else {}).encode()
    return response


def primary_image_body(url: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "images": [{"type": "image_url", "image_url": {"url": url}}]}}]}


def chat_text_body(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}
