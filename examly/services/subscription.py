"""
Subscription and trial state derived from ``profiles`` and ``user_packages``.
"""

from datetime import datetime
from typing import Optional, Union
import logging
import math

import pytz

from examly.database import Database

logger = logging.getLogger(__name__)

PAPER_PACK = "paper_pack"
UNLIMITED = "unlimited"
NO_CELLNO_MESSAGE = "Update your profile with a valid cell number to activate your 3 Months free trial."

def parse_timestamp(value) -> Optional[datetime]:
    """Timezone-aware datetime from a PostgREST timestamp; naive values are UTC"""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = pytz.UTC.localize(parsed)
    return parsed

def is_paid_subscriber(db: Database, user_id: str) -> bool:
    """Active, non-trial package that has not expired"""
    try:
        packages = db.select(
            "user_packages",
            "expires_at",
            filters={"user_id": user_id, "is_active": True, "is_trial": False},
            order_by=[("created_at", True)],
        )
        now = datetime.now(pytz.UTC)
        for package in packages:
            expires_at = parse_timestamp(package.get("expires_at"))
            if expires_at and expires_at > now:
                return True
        return False
    except Exception as e:
        logger.warning(f"Subscription check failed for {user_id}: {e}")
        return False

def latest_active_package(db: Database, user_id: str) -> Optional[dict]:
    """Newest active package row with its catalogue entry under ``package``"""
    rows = db.select(
        "user_packages",
        "*",
        filters={"user_id": user_id, "is_active": True},
        order_by=[("created_at", True)],
        limit=1,
    )
    if not rows:
        return None

    user_package = dict(rows[0])
    user_package["package"] = None
    if user_package.get("package_id"):
        user_package["package"] = db.select_one("packages", "name,type", {"id": user_package["package_id"]})
    return user_package

def build_trial_status(profile: dict, user_package: Optional[dict], now: Optional[datetime] = None) -> dict:
    """Trial and subscription summary for the account page.

    A trial only counts once a cell number is on the profile. An active
    package wins over the trial for the papers remaining; paper packs report
    their remaining count, every other package type is unlimited.
    """
    now = now or datetime.now(pytz.UTC)

    has_cellno = bool(profile.get("cellno"))
    trial_ends_at = parse_timestamp(profile.get("trial_ends_at"))
    is_trial = bool(has_cellno and trial_ends_at and trial_ends_at > now and profile.get("trial_given"))
    days_remaining = 0
    if is_trial:
        days_remaining = max(0, math.ceil((trial_ends_at - now).total_seconds() / 86400))

    has_active_subscription = False
    papers_remaining: Union[int, str] = 0
    package = (user_package or {}).get("package") or {}
    expires_at = parse_timestamp((user_package or {}).get("expires_at"))

    if user_package:
        has_active_subscription = True
        if expires_at is None or expires_at > now:
            if package.get("type") == PAPER_PACK:
                papers_remaining = user_package.get("papers_remaining") or 0
            else:
                papers_remaining = UNLIMITED
    elif is_trial:
        papers_remaining = UNLIMITED

    return {
        "isTrial": is_trial,
        "trialEndsAt": trial_ends_at.isoformat() if trial_ends_at else None,
        "daysRemaining": days_remaining,
        "hasActiveSubscription": has_active_subscription,
        "papersGenerated": profile.get("papers_generated") or 0,
        "papersRemaining": papers_remaining,
        "subscriptionName": package.get("name"),
        "subscriptionType": package.get("type"),
        "subscriptionEndDate": expires_at.isoformat() if expires_at else None,
        "hasCellno": has_cellno,
        "trialEligible": has_cellno and not has_active_subscription and not is_trial,
        "referral_code": profile.get("referral_code"),
        "message": None if has_cellno else NO_CELLNO_MESSAGE,
    }
