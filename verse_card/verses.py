# verse_card/verses.py
"""
經文卡片使用的經節表。api_ref 是 bible-api.com 的查詢字串，text 是 API 失敗時使用的和合本經文。
"""
from typing import NamedTuple, Tuple


class Verse(NamedTuple):
    api_ref: str
    label: str
    text: str


VERSES: Tuple[Verse, ...] = (
    Verse("john 3:16", "約翰福音 3:16",
          "神愛世人，甚至將他的獨生子賜給他們，叫一切信他的，不至滅亡，反得永生。"),
    Verse("philippians 4:13", "腓立比書 4:13",
          "我靠著那加給我力量的，凡事都能做。"),
    Verse("psalms 23:1", "詩篇 23:1",
          "耶和華是我的牧者，我必不致缺乏。"),
    Verse("proverbs 3:5", "箴言 3:5",
          "你要專心仰賴耶和華，不可倚靠自己的聰明。"),
    Verse("isaiah 40:31", "以賽亞書 40:31",
          "但那等候耶和華的必從新得力。他們必如鷹展翅上騰；他們奔跑卻不困倦，行走卻不疲乏。"),
    Verse("matthew 11:28", "馬太福音 11:28",
          "凡勞苦擔重擔的人可以到我這裡來，我就使你們得安息。"),
    Verse("romans 8:28", "羅馬書 8:28",
          "我們曉得萬事都互相效力，叫愛神的人得益處，就是按他旨意被召的人。"),
    Verse("joshua 1:9", "約書亞記 1:9",
          "你當剛強壯膽！不要懼怕，也不要驚惶；因為你無論往哪裡去，耶和華你的神必與你同在。"),
    Verse("1 corinthians 13:4", "哥林多前書 13:4",
          "愛是恆久忍耐，又有恩慈；愛是不嫉妒；愛是不自誇，不張狂。"),
    Verse("psalms 46:1", "詩篇 46:1",
          "神是我們的避難所，是我們的力量，是我們在患難中隨時的幫助。"),
)
