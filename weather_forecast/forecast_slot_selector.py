# weather_forecast/forecast_slot_selector.py
"""
從逐 3 小時的預報清單中，挑出「今天 / 明天 / 後天」的代表時段並計算當日統計。
流程：
1. 用預報服務回傳的時區位移，把每一筆資料的時間換算成當地日期。
2. 以清單第一筆資料的當地日期為「今天」，加上相對天數得到目標日期。
3. 篩選目標日期的資料；如果一筆都沒有，退而使用整份清單的第一筆作為代表。
4. 同一天的資料中，選擇當地時間最接近中午 12 點的一筆（距離相同時取先出現者）。
5. 計算當天的最高/最低溫、最高/最低體感溫度與最高降雨機率。
"""
import datetime
import logging
from typing import Iterable, List, Optional, Sequence

from .weather_models import DayAggregate, ForecastSample

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 24 * 60 * 60
_NOON_SECONDS = 12 * 60 * 60
_EPOCH = datetime.date(1970, 1, 1)


def local_date(epoch_seconds: int, offset_seconds: int) -> datetime.date:
    """把 UTC 時間戳加上時區位移後，截斷成當地的日曆日期。"""
    return _EPOCH + datetime.timedelta(days=(epoch_seconds + offset_seconds) // _SECONDS_PER_DAY)


def _seconds_from_local_noon(epoch_seconds: int, offset_seconds: int) -> int:
    seconds_of_day = (epoch_seconds + offset_seconds) % _SECONDS_PER_DAY
    return abs(seconds_of_day - _NOON_SECONDS)


def pick_nearest_noon(samples: Sequence[ForecastSample], offset_seconds: int) -> ForecastSample:
    """選出當地時間最接近中午的一筆；距離相同時保留清單中先出現的那筆。"""
    best = samples[0]
    best_distance = _seconds_from_local_noon(best.epoch_seconds, offset_seconds)
    for sample in samples[1:]:
        distance = _seconds_from_local_noon(sample.epoch_seconds, offset_seconds)
        if distance < best_distance:
            best, best_distance = sample, distance
    return best


def _min_max(values: Iterable[Optional[float]]):
    present = [v for v in values if v is not None]
    if not present:
        return None, None
    return min(present), max(present)


def select_day(samples: List[ForecastSample], offset_seconds: int, day_offset: int) -> Optional[DayAggregate]:
    """
    根據相對天數 (0=今天, 1=明天, 2=後天) 聚合目標日期的預報資料。

    Args:
        samples: 依時間排序的預報資料。
        offset_seconds: 預報服務回傳的當地時區位移（秒）。
        day_offset: 相對天數。

    Returns:
        DayAggregate；清單為空時回傳 None。
    """
    if not samples:
        logger.info("預報清單為空，沒有可以挑選的時段。")
        return None

    base_date = local_date(samples[0].epoch_seconds, offset_seconds)
    target_date = base_date + datetime.timedelta(days=day_offset)

    same_day = [s for s in samples if local_date(s.epoch_seconds, offset_seconds) == target_date]

    if not same_day:
        # 目標日期超出預報範圍時，以第一筆資料作為「最接近」的代表
        logger.info(f"預報中沒有 {target_date} 的資料，改用第一筆資料作為代表。")
        return DayAggregate(
            target_date=target_date,
            representative=samples[0],
            is_fallback=True,
        )

    representative = pick_nearest_noon(same_day, offset_seconds)
    min_temp, max_temp = _min_max(s.temperature for s in same_day)
    min_feels, max_feels = _min_max(s.feels_like for s in same_day)
    max_pop = max(
        (s.precipitation_probability if s.precipitation_probability is not None else 0.0) for s in same_day
    )

    logger.debug(
        f"目標日期 {target_date}：共 {len(same_day)} 筆，代表時段 {representative.epoch_seconds}，"
        f"氣溫 {min_temp}~{max_temp}，體感 {min_feels}~{max_feels}，降雨 {max_pop}"
    )
    return DayAggregate(
        target_date=target_date,
        representative=representative,
        min_temp=min_temp,
        max_temp=max_temp,
        min_feels_like=min_feels,
        max_feels_like=max_feels,
        max_precipitation_probability=max_pop,
        sample_count=len(same_day),
    )
