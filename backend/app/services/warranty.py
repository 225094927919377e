import math
from datetime import date, datetime, timezone
from typing import Iterable, List, Literal, Optional, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

Status = Literal["Active", "Expiring Soon", "Expired"]

EXPIRING_SOON_DAYS = 30

SEARCH_FIELDS = ("product_name", "owner_name", "owner_email", "serial_number")

DateLike = Union[str, date, datetime]


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, str):
        value = date_parser.isoparse(value)
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    # naive timestamps from the warranty service are UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def compute_expiry(registration_date: DateLike, warranty_period_months: int) -> datetime:
    # calendar months; Jan 31 + 1 month clamps to the end of February
    return _as_datetime(registration_date) + relativedelta(months=int(warranty_period_months or 0))


def days_remaining(expiry: datetime, now: Optional[datetime] = None) -> int:
    now = _as_datetime(now) if now is not None else datetime.now(timezone.utc)
    return math.floor((expiry - now).total_seconds() / 86400)


def compute_status(days: int) -> Status:
    if days < 0:
        return "Expired"
    if days < EXPIRING_SOON_DAYS:
        return "Expiring Soon"
    return "Active"


def warranty_status(
    registration_date: DateLike,
    warranty_period_months: int,
    now: Optional[datetime] = None,
) -> Status:
    expiry = compute_expiry(registration_date, warranty_period_months)
    return compute_status(days_remaining(expiry, now))


def compute_warranty_fields(device: dict, now: Optional[datetime] = None) -> dict:
    expiry = compute_expiry(device.get("registration_date"), device.get("warranty_period_months") or 0)
    remaining = days_remaining(expiry, now)
    return {
        "expiry_date": expiry.isoformat(),
        "days_remaining": remaining,
        "status": compute_status(remaining),
    }


def search_devices(devices: Iterable[dict], term: Optional[str]) -> List[dict]:
    devices = list(devices)
    needle = (term or "").strip().lower()
    if not needle:
        return devices

    return [
        d for d in devices
        if any(needle in str(d.get(field) or "").lower() for field in SEARCH_FIELDS)
    ]


def summarize(devices: Iterable[dict], now: Optional[datetime] = None) -> dict:
    counts = {"total": 0, "active": 0, "expiring_soon": 0, "expired": 0}
    for d in devices:
        status = compute_warranty_fields(d, now)["status"]
        counts["total"] += 1
        if status == "Expired":
            counts["expired"] += 1
        elif status == "Expiring Soon":
            counts["expiring_soon"] += 1
        else:
            counts["active"] += 1
    return counts
