# divination/divination_handler.py
"""
抽籤：從籤詩表隨機抽一支籤，回覆籤詩卡片。
"""
import logging
import random
from typing import List, Optional

from linebot.v3.messaging.models import FlexBox, FlexBubble, FlexMessage, FlexSeparator, Message

from handlers.intents import Divination, IncomingMessage
from utils.flex_message_elements import make_footer_note, make_paragraph, make_title
from utils.message_builder import build_flex_or_text
from .lots import LOTS, Lot

logger = logging.getLogger(__name__)

RANK_COLORS = {
    "上上籤": "#C0392B",
    "上籤": "#D35400",
    "中上籤": "#B8860B",
    "中籤": "#2E8B57",
    "中下籤": "#4169E1",
    "下籤": "#555555",
}


def draw_lot(rng: Optional[random.Random] = None) -> Lot:
    return (rng or random).choice(LOTS)


def format_lot_text(lot: Lot) -> str:
    lines = [f"【第 {lot.number} 籤｜{lot.rank}】"]
    lines.extend(lot.poem)
    lines.append("")
    lines.append(f"解籤：{lot.meaning}")
    return "\n".join(lines)


def build_lot_flex(lot: Lot) -> FlexMessage:
    contents = make_title(f"🎋 第 {lot.number} 籤", lot.rank)
    contents.append(FlexBox(
        layout="vertical",
        margin="lg",
        spacing="sm",
        contents=[make_paragraph(line, color="#000000", margin="sm", size="lg") for line in lot.poem]
    ))
    contents.append(FlexSeparator(margin="md"))
    contents.append(make_paragraph(f"解籤：{lot.meaning}", color=RANK_COLORS.get(lot.rank, "#333333")))
    contents.append(make_footer_note("--- 籤詩僅供娛樂參考 ---"))

    bubble = FlexBubble(size="mega", body=FlexBox(layout="vertical", contents=contents))
    return FlexMessage(alt_text=f"第 {lot.number} 籤｜{lot.rank}", contents=bubble)


def handle_divination(intent: Divination, message: IncomingMessage, services) -> List[Message]:
    lot = draw_lot(services.rng)
    logger.info(f"用戶 {message.user_id} 抽到第 {lot.number} 籤 ({lot.rank})。")
    return [build_flex_or_text(lambda: build_lot_flex(lot), format_lot_text(lot))]
