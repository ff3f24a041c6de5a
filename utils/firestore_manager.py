# utils/firestore_manager.py
"""
與 Google Cloud Firestore 互動的資料庫模組，用於保存使用者的對話上下文（最後查詢的地點）。
1. Firebase 初始化：使用 Google Application Default Credentials (ADC) 初始化，只在第一次使用時執行。
2. 使用者文件的讀寫：以 set(..., merge=True) 只更新指定欄位。
"""
import logging
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import firestore
from firebase_admin.credentials import ApplicationDefault

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"

_db = None


def initialize_firebase():
    """
    建立與 Firebase Firestore 的連線；憑證自動從部署環境（例如 Cloud Run 服務帳號）取得。
    """
    try:
        firebase_admin.initialize_app(ApplicationDefault())
        logger.info("Firebase Firestore 連線成功。")
    except Exception as e:
        logger.error(f"Firebase 連線失敗: {e}", exc_info=True)
        raise RuntimeError("無法連線到 Firebase Firestore") from e


def get_db():
    global _db
    if _db is None:
        if not firebase_admin._apps:
            initialize_firebase()
        _db = firestore.client()
    return _db


def _users_ref():
    return get_db().collection(USERS_COLLECTION)


def upsert_user_fields(user_id: str, **data: Any) -> None:
    """只更新指定欄位，不影響文件中已存在的其他欄位。"""
    _users_ref().document(user_id).set(data, merge=True)


def get_user_data(user_id: str) -> Optional[Dict[str, Any]]:
    doc = _users_ref().document(user_id).get()
    return doc.to_dict() if doc.exists else None
