# utils/flex_message_elements.py
"""
建立 LINE Flex Message 常用 UI 元件的輔助函式。
天氣、星座、抽籤、經文等卡片共用同一組標題列、鍵值列與段落樣式。
"""
from typing import Any, List, Optional
from linebot.v3.messaging.models import FlexBox, FlexText, FlexSeparator

def make_kv_row(label: str, value: Any) -> FlexBox:
    """
    一行「標籤：值」的橫向排版；value 為 None 時顯示「無資料」。
    """
    display_value = str(value) if value is not None else "無資料"

    return FlexBox(
        layout="baseline",
        spacing="sm",
        contents=[
            FlexText(
                text=label,
                color="#4169E1",
                size="md",
                flex=4
            ),
            FlexText(
                text=display_value,
                wrap=True,
                color="#8A2BE2",
                size="md",
                flex=5
            )
        ]
    )

def make_title(text: str, subtitle: Optional[str] = None) -> List[Any]:
    """卡片頂端的置中標題，可選副標題。"""
    contents: List[Any] = [
        FlexText(
            text=text,
            color="#000000",
            weight="bold",
            size="lg",
            margin="md",
            wrap=True,
            align="center"
        )
    ]
    if subtitle:
        contents.append(
            FlexText(
                text=subtitle,
                color="#666666",
                size="sm",
                margin="sm",
                wrap=True,
                align="center"
            )
        )
    contents.append(FlexSeparator(margin="md"))
    return contents

def make_paragraph(text: str, color: str = "#333333", margin: str = "md", size: str = "md") -> FlexText:
    return FlexText(text=text, wrap=True, color=color, margin=margin, size=size)

def make_footer_note(text: str) -> FlexText:
    return FlexText(
        text=text,
        size="sm",
        color="#808080",
        wrap=True,
        margin="md",
        align="center"
    )
