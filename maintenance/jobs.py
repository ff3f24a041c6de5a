# maintenance/jobs.py
"""
定期維護工作：更新上市股票對照表，並預先產生明天的十二星座運勢。
由 /update_stocks 端點（外部排程呼叫）或本機的 scheduler.py 觸發。
"""
import datetime
import logging

from horoscope.horoscope_service import pregenerate
from utils.errors import BotError
from utils.local_time import local_today
from .stock_listing import fetch_stock_day_all, refresh_stock_table

logger = logging.getLogger(__name__)


def run_maintenance(services, fetch=fetch_stock_day_all, today=None) -> dict:
    """
    回傳執行結果摘要；股票表更新失敗會往外拋出，運勢預先產生失敗只記錄在結果中。
    """
    count = refresh_stock_table(services.cache, fetch)

    tomorrow = (today or local_today()) + datetime.timedelta(days=1)
    try:
        horoscopes = pregenerate(tomorrow, services.llm, services.cache)
    except BotError as e:
        logger.error(f"預先產生 {tomorrow} 星座運勢失敗: {e}")
        horoscopes = 0

    return {"ok": True, "count": count, "horoscopes": horoscopes, "horoscope_date": tomorrow.isoformat()}
