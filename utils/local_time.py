# utils/local_time.py
"""
以 LOCAL_TIMEZONE（預設 Asia/Taipei）計算「今天」。
快取鍵中的日期都以這裡的結果為準，跨過午夜就會產生新的鍵。
"""
import datetime

import pytz

from config import LOCAL_TIMEZONE


def local_now(tz_name: str = LOCAL_TIMEZONE) -> datetime.datetime:
    return datetime.datetime.now(pytz.timezone(tz_name))


def local_today(tz_name: str = LOCAL_TIMEZONE) -> datetime.date:
    return local_now(tz_name).date()
