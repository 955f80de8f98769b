"""
Signed-in customer endpoints: saved addresses and email preferences.

Records are keyed by ``user_email``; every read and write checks it
against the email in the caller's Supabase JWT.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from api.errors import http_error, not_found
from config.database import get_db
from core.auth import SupabaseUser, require_auth
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Account"])

ADDRESSES_TABLE = "addresses"
PREFERENCES_TABLE = "user_preferences"

DEFAULT_PREFERENCES = {
    "order_updates": True,
    "newsletter": True,
    "promotions": False,
    "sms_notifications": False,
}


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class AddressInput(_CamelModel):
    label: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    street: str = Field(..., min_length=1)
    apartment: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    phone: Optional[str] = None
    is_default: bool = False


class AddressUpdate(_CamelModel):
    label: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    street: Optional[str] = None
    apartment: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    is_default: Optional[bool] = None


class PreferencesUpdate(_CamelModel):
    order_updates: Optional[bool] = None
    newsletter: Optional[bool] = None
    promotions: Optional[bool] = None
    sms_notifications: Optional[bool] = None


def _email(user: SupabaseUser) -> str:
    if not user.email:
        raise http_error(401, "Unauthorized", "Oturumunuzda e-posta adresi bulunamadı.")
    return user.email.lower()


def _owned_address(db, address_id: str, email: str) -> Dict[str, Any]:
    rows = db.table(ADDRESSES_TABLE).select("*").eq("id", address_id).limit(1).execute().data
    if not rows:
        raise not_found("Address")
    if (rows[0].get("user_email") or "").lower() != email:
        raise http_error(403, "Forbidden")
    return rows[0]


def _clear_default(db, email: str, keep_id: Optional[str] = None) -> None:
    query = db.table(ADDRESSES_TABLE).update({"is_default": False}).eq("user_email", email)
    if keep_id:
        query = query.neq("id", keep_id)
    query.execute()


def _preferences_api(row: Dict[str, Any]) -> Dict[str, bool]:
    return {
        "orderUpdates": bool(row.get("order_updates")),
        "newsletter": bool(row.get("newsletter")),
        "promotions": bool(row.get("promotions")),
        "smsNotifications": bool(row.get("sms_notifications")),
    }


# =============================================================================
# Addresses
# =============================================================================

@router.get("/api/addresses")
def list_addresses(
    user: SupabaseUser = Depends(require_auth),
    db=Depends(get_db),
) -> List[Dict[str, Any]]:
    return (
        db.table(ADDRESSES_TABLE)
        .select("*")
        .eq("user_email", _email(user))
        .order("is_default", desc=True)
        .order("created_at", desc=True)
        .execute()
        .data
        or []
    )


@router.post("/api/addresses", status_code=status.HTTP_201_CREATED)
def create_address(
    address: AddressInput,
    user: SupabaseUser = Depends(require_auth),
    db=Depends(get_db),
) -> Dict[str, Any]:
    email = _email(user)
    if address.is_default:
        _clear_default(db, email)

    row = {**address.model_dump(), "user_email": email}
    result = db.table(ADDRESSES_TABLE).insert(row).execute()
    if not result.data:
        raise http_error(500, "Failed to create address")
    logger.info("Address created", user_id=user.id)
    return result.data[0]


@router.put("/api/addresses/{address_id}")
def update_address(
    address_id: str,
    changes: AddressUpdate,
    user: SupabaseUser = Depends(require_auth),
    db=Depends(get_db),
) -> Dict[str, Any]:
    email = _email(user)
    existing = _owned_address(db, address_id, email)

    update = changes.model_dump(exclude_none=True)
    if update.get("is_default"):
        _clear_default(db, email, keep_id=address_id)
    update["updated_at"] = datetime.now(timezone.utc).isoformat()

    result = db.table(ADDRESSES_TABLE).update(update).eq("id", address_id).execute()
    return (result.data or [{**existing, **update}])[0]


@router.delete("/api/addresses/{address_id}")
def delete_address(
    address_id: str,
    user: SupabaseUser = Depends(require_auth),
    db=Depends(get_db),
) -> Dict[str, Any]:
    _owned_address(db, address_id, _email(user))
    db.table(ADDRESSES_TABLE).delete().eq("id", address_id).execute()
    return {"success": True}


# =============================================================================
# Preferences
# =============================================================================

@router.get("/api/user/preferences")
def get_preferences(
    user: SupabaseUser = Depends(require_auth),
    db=Depends(get_db),
) -> Dict[str, bool]:
    """Stored preferences; defaults are created on first read."""
    email = _email(user)
    rows = db.table(PREFERENCES_TABLE).select("*").eq("user_email", email).limit(1).execute().data
    if rows:
        return _preferences_api(rows[0])

    row = {**DEFAULT_PREFERENCES, "user_email": email}
    db.table(PREFERENCES_TABLE).insert(row).execute()
    return _preferences_api(row)


@router.put("/api/user/preferences")
def update_preferences(
    changes: PreferencesUpdate,
    user: SupabaseUser = Depends(require_auth),
    db=Depends(get_db),
) -> Dict[str, bool]:
    email = _email(user)
    rows = db.table(PREFERENCES_TABLE).select("*").eq("user_email", email).limit(1).execute().data
    current = rows[0] if rows else {**DEFAULT_PREFERENCES, "user_email": email}

    merged = {**current, **changes.model_dump(exclude_none=True), "user_email": email}
    merged["updated_at"] = datetime.now(timezone.utc).isoformat()
    db.table(PREFERENCES_TABLE).upsert(merged, on_conflict="user_email").execute()
    return _preferences_api(merged)
