"""Repository-level pytest setup.

Environment defaults are set before any project module imports config.py,
so tests never depend on a local .env or real credentials.
"""
import os

os.environ.setdefault("LINE_CHANNEL_SECRET", "test-channel-secret")
os.environ.setdefault("LINE_CHANNEL_ACCESS_TOKEN", "test-access-token")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("BOT_USER_ID", "Ubot0000")
os.environ["REDIS_URL"] = ""
os.environ["CONTEXT_STORE_BACKEND"] = "cache"
