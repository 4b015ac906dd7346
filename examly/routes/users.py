from fastapi import APIRouter, Depends
import logging

from examly.database import Database, get_db
from examly.services.subscription import build_trial_status, latest_active_package
from examly.utils.auth_utils import get_current_user
from examly.utils.errors import ApiError

logger = logging.getLogger(__name__)

router = APIRouter()

TRIAL_PROFILE_COLUMNS = "id,created_at,papers_generated,trial_ends_at,trial_given,cellno,subscription_status,referral_code"

@router.get("/user/trial-status")
async def get_trial_status(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Trial, package and papers-remaining summary for the signed-in user"""
    user_id = current_user["id"]
    try:
        profile = db.select_one("profiles", TRIAL_PROFILE_COLUMNS, {"id": user_id})
    except Exception as e:
        logger.error(f"Profile fetch error for {user_id}: {e}")
        raise ApiError(500, "Failed to fetch profile", str(e))
    if not profile:
        raise ApiError(500, "Failed to fetch profile")

    try:
        user_package = latest_active_package(db, user_id)
    except Exception as e:
        logger.error(f"Package fetch error for {user_id}: {e}")
        raise ApiError(500, "Failed to fetch package", str(e))

    return build_trial_status(profile, user_package)

@router.get("/instituteName")
async def get_institute_name(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Institute name shown on the user's papers"""
    try:
        profile = db.select_one("profiles", "institution", {"id": current_user["id"]})
    except Exception as e:
        logger.error(f"Profile fetch error for {current_user['id']}: {e}")
        raise ApiError(500, "Failed to fetch profile", str(e))
    if not profile:
        raise ApiError(500, "Failed to fetch profile")

    return {"profile": {"institution": profile.get("institution")}}
