# scheduler.py
"""
本地端使用的排程器，在開發階段或沒有外部排程服務時定時執行維護工作。
使用 `schedule` 函式庫管理排程任務。
在雲端環境中，同一個工作由外部排程服務帶著 CRON_SECRET 呼叫 /update_stocks 觸發。
***本機測試時，單獨執行這個檔案
"""
import time
import logging
import schedule

from main_initializer import initialize
from maintenance.jobs import run_maintenance
from utils.errors import UpstreamError

logger = logging.getLogger(__name__)


def run_maintenance_job(services) -> None:
    try:
        result = run_maintenance(services)
        logger.info(f"維護任務完成: {result}")
    except UpstreamError as e:
        logger.error(f"維護任務執行失敗: {e}")


def register_jobs(services, scheduler=schedule) -> None:
    # 證交所盤後資料約在 14:30 後更新
    scheduler.every().day.at("15:00").do(run_maintenance_job, services).tag('maintenance')
    # 跨日前再跑一次，確保明天的星座運勢已經產生
    scheduler.every().day.at("23:30").do(run_maintenance_job, services).tag('maintenance')


def main():
    services = initialize()
    register_jobs(services)
    logger.info("排程已啟動。")

    while True:
        schedule.run_pending()
        time.sleep(1)


if __name__ == "__main__":
    main()
