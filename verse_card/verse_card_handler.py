# verse_card/verse_card_handler.py
"""
經文卡片：隨機選一節經文，優先使用 bible-api.com 的內容，查不到時使用內建經文。
"""
import logging
from typing import List, Optional

from linebot.v3.messaging.models import FlexBox, FlexBubble, FlexMessage, Message

from handlers.intents import IncomingMessage, VerseCard
from utils.flex_message_elements import make_footer_note, make_paragraph, make_title
from utils.message_builder import build_flex_or_text
from .bible_api import fetch_verse_text
from .verses import VERSES, Verse

logger = logging.getLogger(__name__)


def verse_text(verse: Verse, fetcher=None) -> str:
    fetch = fetcher or fetch_verse_text
    text: Optional[str] = fetch(verse.api_ref)
    if text:
        return text
    logger.info(f"經文 {verse.api_ref} 查詢失敗，使用內建經文。")
    return verse.text


def format_verse_text(verse: Verse, text: str) -> str:
    return f"📖 {text}\n（{verse.label}）"


def build_verse_flex(verse: Verse, text: str) -> FlexMessage:
    contents = make_title("📖 今日經文")
    contents.append(make_paragraph(text, color="#000000", margin="lg", size="lg"))
    contents.append(make_paragraph(verse.label, color="#666666", size="sm"))
    contents.append(make_footer_note("--- 中文和合本 ---"))

    bubble = FlexBubble(size="mega", body=FlexBox(layout="vertical", contents=contents))
    return FlexMessage(alt_text=f"今日經文｜{verse.label}", contents=bubble)


def handle_verse_card(intent: VerseCard, message: IncomingMessage, services) -> List[Message]:
    verse = services.rng.choice(VERSES)
    text = verse_text(verse, services.verse_fetcher)
    return [build_flex_or_text(lambda: build_verse_flex(verse, text), format_verse_text(verse, text))]
