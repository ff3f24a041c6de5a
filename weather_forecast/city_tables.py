# weather_forecast/city_tables.py
"""
地名別名與查詢表（靜態資料）。
1. TW_CITY_MAP：台灣縣市的各種寫法（台/臺、簡體字）對應到標準英文名稱。
2. TW_ISLANDS：離島名稱與羅馬拼音對應到固定座標，一般的地理編碼服務常常解析錯誤。
3. COUNTRY_HINTS：常見於多個國家的城市名稱（例如日本城市），對應到「城市,國碼」的查詢字串。
這些表以 CityTables 打包後注入到正規化器、地理編碼解析器與意圖路由器，不在執行期間修改。
"""
from types import MappingProxyType
from typing import Mapping, NamedTuple, Tuple

# --- 台灣主要縣市：所有寫法 → 標準名稱 ---
TW_CITY_MAP = MappingProxyType({
    "台北": "Taipei",
    "臺北": "Taipei",
    "新北": "New Taipei",
    "台中": "Taichung",
    "臺中": "Taichung",
    "台南": "Tainan",
    "臺南": "Tainan",
    "高雄": "Kaohsiung",
    "桃園": "Taoyuan",
    "桃园": "Taoyuan",
    "新竹": "Hsinchu",
    "嘉義": "Chiayi",
    "嘉义": "Chiayi",
    "宜蘭": "Yilan",
    "宜兰": "Yilan",
    "花蓮": "Hualien",
    "花莲": "Hualien",
    "台東": "Taitung",
    "臺東": "Taitung",
    "台东": "Taitung",
    "基隆": "Keelung",
    "苗栗": "Miaoli",
    "彰化": "Changhua",
    "南投": "Nantou",
    "雲林": "Yunlin",
    "云林": "Yunlin",
    "屏東": "Pingtung",
    "屏东": "Pingtung",
})


class IslandInfo(NamedTuple):
    name: str
    lat: float
    lon: float


# --- 離島：名稱與拼音 → 固定座標 ---
_PENGHU = IslandInfo("澎湖", 23.5711, 119.5793)
_KINMEN = IslandInfo("金門", 24.4493, 118.3767)
_MATSU = IslandInfo("馬祖", 26.1608, 119.9497)
_GREEN_ISLAND = IslandInfo("綠島", 22.6614, 121.4905)
_ORCHID_ISLAND = IslandInfo("蘭嶼", 22.0444, 121.5484)
_XIAOLIUQIU = IslandInfo("小琉球", 22.3420, 120.3701)

TW_ISLANDS = MappingProxyType({
    "澎湖": _PENGHU,
    "penghu": _PENGHU,
    "馬公": _PENGHU,
    "马公": _PENGHU,
    "金門": _KINMEN,
    "金门": _KINMEN,
    "kinmen": _KINMEN,
    "quemoy": _KINMEN,
    "馬祖": _MATSU,
    "马祖": _MATSU,
    "matsu": _MATSU,
    "南竿": _MATSU,
    "nangan": _MATSU,
    "綠島": _GREEN_ISLAND,
    "绿岛": _GREEN_ISLAND,
    "green island": _GREEN_ISLAND,
    "ludao": _GREEN_ISLAND,
    "蘭嶼": _ORCHID_ISLAND,
    "兰屿": _ORCHID_ISLAND,
    "orchid island": _ORCHID_ISLAND,
    "lanyu": _ORCHID_ISLAND,
    "小琉球": _XIAOLIUQIU,
    "琉球": _XIAOLIUQIU,
    "xiaoliuqiu": _XIAOLIUQIU,
    "liuqiu": _XIAOLIUQIU,
})

# --- 跨國同名或常被誤判的城市 → 「城市,國碼」---
COUNTRY_HINTS = MappingProxyType({
    "東京": "Tokyo,JP",
    "东京": "Tokyo,JP",
    "tokyo": "Tokyo,JP",
    "大阪": "Osaka,JP",
    "osaka": "Osaka,JP",
    "京都": "Kyoto,JP",
    "kyoto": "Kyoto,JP",
    "名古屋": "Nagoya,JP",
    "nagoya": "Nagoya,JP",
    "札幌": "Sapporo,JP",
    "sapporo": "Sapporo,JP",
    "福岡": "Fukuoka,JP",
    "福冈": "Fukuoka,JP",
    "fukuoka": "Fukuoka,JP",
    "沖繩": "Naha,JP",
    "冲绳": "Naha,JP",
    "那霸": "Naha,JP",
    "okinawa": "Naha,JP",
    "橫濱": "Yokohama,JP",
    "横滨": "Yokohama,JP",
    "yokohama": "Yokohama,JP",
    "神戶": "Kobe,JP",
    "神户": "Kobe,JP",
    "kobe": "Kobe,JP",
    "奈良": "Nara,JP",
    "nara": "Nara,JP",
    "首爾": "Seoul,KR",
    "首尔": "Seoul,KR",
    "seoul": "Seoul,KR",
    "釜山": "Busan,KR",
    "busan": "Busan,KR",
    "香港": "Hong Kong,HK",
    "hong kong": "Hong Kong,HK",
})


class CityTables(NamedTuple):
    """注入用的唯讀查詢表組合。"""
    tw_cities: Mapping[str, str]
    islands: Mapping[str, IslandInfo]
    country_hints: Mapping[str, str]

    @property
    def canonical_tw_cities(self) -> Tuple[str, ...]:
        # 保留順序去重
        return tuple(dict.fromkeys(self.tw_cities.values()))

    def is_taiwan_city(self, name: str) -> bool:
        if not name:
            return False
        key = name.strip()
        return key in self.tw_cities or key.lower() in {c.lower() for c in self.tw_cities.values()}

    def find_island(self, name: str):
        if not name:
            return None
        return self.islands.get(name.strip().lower())

    def find_country_hint(self, name: str):
        if not name:
            return None
        return self.country_hints.get(name.strip().lower())


DEFAULT_TABLES = CityTables(
    tw_cities=TW_CITY_MAP,
    islands=TW_ISLANDS,
    country_hints=COUNTRY_HINTS,
)
