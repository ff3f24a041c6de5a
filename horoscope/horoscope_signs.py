# horoscope/horoscope_signs.py
"""
十二星座對照表：繁體、簡體與常見別稱 → 標準星座代碼。
"""
import re
from typing import Optional

SIGN_LABELS = {
    "aries": "牡羊座",
    "taurus": "金牛座",
    "gemini": "雙子座",
    "cancer": "巨蟹座",
    "leo": "獅子座",
    "virgo": "處女座",
    "libra": "天秤座",
    "scorpio": "天蠍座",
    "sagittarius": "射手座",
    "capricorn": "摩羯座",
    "aquarius": "水瓶座",
    "pisces": "雙魚座",
}

SIGN_ALIASES = {
    "牡羊": "aries", "白羊": "aries",
    "金牛": "taurus",
    "雙子": "gemini", "双子": "gemini",
    "巨蟹": "cancer",
    "獅子": "leo", "狮子": "leo",
    "處女": "virgo", "处女": "virgo",
    "天秤": "libra", "天平": "libra",
    "天蠍": "scorpio", "天蝎": "scorpio",
    "射手": "sagittarius", "人馬": "sagittarius", "人马": "sagittarius",
    "摩羯": "capricorn", "魔羯": "capricorn", "山羊": "capricorn",
    "水瓶": "aquarius", "寶瓶": "aquarius", "宝瓶": "aquarius",
    "雙魚": "pisces", "双鱼": "pisces", "雙鱼": "pisces",
}

# 星座名稱後面必須接「座」才算，例如「獅子座」
_SIGN_PATTERN = re.compile("(" + "|".join(sorted(SIGN_ALIASES, key=len, reverse=True)) + ")座")


def find_sign(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    match = _SIGN_PATTERN.search(text)
    return SIGN_ALIASES[match.group(1)] if match else None
