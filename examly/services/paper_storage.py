"""
Persisted paper and answer-key PDFs in Supabase Storage.

Papers live under ``<user id>/<timestamp>_<title>.pdf`` in the papers
bucket; only the newest ``max_stored_papers`` per user are kept. Keys live
under ``<user id>/<timestamp>_<paper id>_key.pdf`` in the key bucket.
"""

import logging
import re
import time
from typing import Optional, Tuple

from examly.config import settings
from examly.database import Storage

logger = logging.getLogger(__name__)

def _timestamp() -> int:
    return int(time.time() * 1000)

def save_user_pdf(storage: Storage, user_id: str, content: bytes, title: str) -> str:
    """Upload a paper PDF and prune the user's oldest papers"""
    bucket = settings.papers_bucket
    sanitized = re.sub(r"[^a-zA-Z0-9_\-.]", "_", title or "Paper")
    path = f"{user_id}/{_timestamp()}_{sanitized}.pdf"
    storage.upload(bucket, path, content)

    try:
        files = storage.list(bucket, user_id)
    except Exception as e:
        logger.warning(f"Could not list stored papers for {user_id}: {e}")
        return path

    # Timestamp prefix makes name order newest first
    names = sorted((f["name"] for f in files if f.get("name", "").endswith(".pdf")), reverse=True)
    stale = [f"{user_id}/{name}" for name in names[settings.max_stored_papers:]]
    if stale:
        try:
            storage.remove(bucket, stale)
            logger.info(f"Removed {len(stale)} old paper(s) for {user_id}")
        except Exception as e:
            logger.warning(f"Could not remove old papers for {user_id}: {e}")

    return path

def save_answer_key(storage: Storage, user_id: str, paper_id: str, content: bytes) -> str:
    path = f"{user_id}/{_timestamp()}_{paper_id}_key.pdf"
    storage.upload(settings.keys_bucket, path, content)
    return path

def split_public_url(url: Optional[str]) -> Optional[Tuple[str, str]]:
    """``(bucket, path)`` for a public object URL of this project, else None"""
    if not url:
        return None
    base = settings.public_object_url("", "").rstrip("/") + "/"
    if not url.startswith(base):
        return None
    bucket, _, path = url[len(base):].partition("/")
    if not bucket or not path:
        return None
    return bucket, path
