# verse_card/bible_api.py
"""
從 bible-api.com 取得經文內容。失敗時回傳 None，由呼叫端改用內建經文。
"""
import logging
from typing import Optional

import requests

from config import BIBLE_API_URL, BIBLE_TRANSLATION

logger = logging.getLogger(__name__)


def fetch_verse_text(api_ref: str, translation: str = BIBLE_TRANSLATION) -> Optional[str]:
    url = f"{BIBLE_API_URL}{api_ref}"
    try:
        logger.debug(f"正在查詢經文 {api_ref} ({translation})")
        response = requests.get(url, params={"translation": translation})
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as e:
        logger.warning(f"查詢經文 {api_ref} 時發生網路或 HTTP 錯誤: {e}")
        return None
    except ValueError as e:
        logger.warning(f"解析經文回應時發生錯誤 (無效的 JSON): {e}")
        return None

    text = data.get("text") if isinstance(data, dict) else None
    if not text or not text.strip():
        return None
    # 和合本的回應中字與字之間常夾有空白與換行
    return "".join(text.split())
