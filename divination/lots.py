# divination/lots.py
"""
籤詩表。每支籤有籤號、吉凶等第、四句籤詩與白話解說。
"""
from typing import NamedTuple, Tuple


class Lot(NamedTuple):
    number: int
    rank: str
    poem: Tuple[str, str, str, str]
    meaning: str


LOTS: Tuple[Lot, ...] = (
    Lot(1, "上上籤", ("日出東方照四方", "雲開霧散見天光", "行人在外皆平安", "所求諸事盡吉祥"),
        "諸事順利，過去的阻礙正在消散，適合主動出擊。"),
    Lot(2, "上籤", ("春風得意馬蹄疾", "一日看盡長安花", "莫嫌此去路途遠", "自有貴人暗相扶"),
        "運勢上揚，有人願意幫忙，記得把握時機並心存感謝。"),
    Lot(3, "中上籤", ("守得雲開見月明", "耐心等待自分明", "急躁反成三分失", "從容應對事可成"),
        "結果會好，但需要耐心，急著求成反而容易出錯。"),
    Lot(4, "中籤", ("平地行舟風不起", "不進不退守本分", "今日宜靜不宜動", "明朝再議也無妨"),
        "運勢平穩，今天不適合做重大決定，先把手邊的事做好。"),
    Lot(5, "中籤", ("半山半水半晴天", "得失之間看心田", "量力而為莫強求", "知足常樂福自添"),
        "有得有失，照自己的步調走，不必和別人比較。"),
    Lot(6, "中下籤", ("風吹雨打落花時", "暫時委屈莫傷悲", "冬去春來終有日", "枯木逢春再發枝"),
        "眼前有些不順，但只是過渡期，先保留實力。"),
    Lot(7, "下籤", ("夜行無燈路難尋", "前方石多莫貪行", "且回原處思後路", "遇事三思可避凶"),
        "容易判斷失誤，重要的事情先緩一緩，多聽別人意見。"),
    Lot(8, "上籤", ("一舟順水下江東", "兩岸青山送好風", "財帛自來心自在", "家和人旺樂融融"),
        "財運與家運都不錯，適合和家人朋友分享好消息。"),
    Lot(9, "中上籤", ("讀書燈下苦用功", "十年寒窗一日通", "莫道付出無人見", "金榜題名有時逢"),
        "努力會被看見，學業與工作上的付出即將有成果。"),
    Lot(10, "中籤", ("雙燕銜泥築新巢", "一草一木慢慢熬", "姻緣自有天安排", "莫把心急當良藥"),
        "感情與人際關係需要時間經營，順其自然最好。"),
)
