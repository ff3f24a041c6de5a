# calorie/food_parser.py
"""
從「我吃了雞排、珍奶跟滷肉飯 熱量多少」這類訊息中拆出食物清單。
"""
import re
from typing import Tuple

_LEADING_ATE = re.compile(r"^\s*(我|今天|今日|剛剛|剛才|刚刚|早上|中午|晚上)*\s*(剛|刚)?(吃了|喝了|吃|喝)\s*")
_TRAILING_QUESTION = re.compile(
    r"(有)?(多少)?(的)?(總|总)?(熱量|热量|卡路里|大卡|kcal|calories?)(是)?(多少|有多少|幾|几)?(呢|嗎|吗)?[?？!！。.]*\s*$",
    re.IGNORECASE,
)
_CALORIE_WORDS = re.compile(r"(熱量|热量|卡路里|大卡|kcal)", re.IGNORECASE)
# 「和牛」不是分隔符號
_SEPARATORS = re.compile(r"\s*(?:、|,|，|;|；|/|\+|＋|和(?!牛)|跟|及|與|与|還有|还有)\s*|\s+")


def extract_food_items(text: str) -> Tuple[str, ...]:
    """去掉開頭的「我吃了」與結尾的熱量問句，再依常見分隔符號拆成食物清單。"""
    if not text:
        return ()
    body = _LEADING_ATE.sub("", text.strip(), count=1)
    body = _TRAILING_QUESTION.sub("", body)
    body = _CALORIE_WORDS.sub(" ", body)
    items = [item.strip() for item in _SEPARATORS.split(body)]
    return tuple(dict.fromkeys(item for item in items if item))
