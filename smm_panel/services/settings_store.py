import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.orm import Session

from smm_panel.core.config import get_settings
from smm_panel.models import Setting

logger = logging.getLogger(__name__)
settings = get_settings()

DEFAULT_SETTINGS: dict[str, Any] = {
    "site_name": "SMM WebPanel",
    "site_logo": "",
    "maintenance_mode": False,
    "currency": "USD",
    "min_deposit": float(settings.min_deposit_default),
    "max_deposit": float(settings.max_deposit_default),
}


TRUTHY = frozenset({"1", "true", "yes", "on"})


def _as_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value if value is not None else "").strip().lower() in TRUTHY


def _decode(setting_type: str, raw: str | None) -> Any:
    if setting_type == "boolean":
        return _as_flag(raw)
    if setting_type == "number":
        try:
            return float(raw or 0)
        except (TypeError, ValueError):
            logger.warning("Stored setting is not a number: %r", raw)
            return 0.0
    return raw if raw is not None else ""


def _coerce_known(name: str, value: Any) -> Any:
    # Keys with a typed default keep that type whatever the client sends.
    default = DEFAULT_SETTINGS.get(name)
    if isinstance(default, bool):
        return _as_flag(value)
    if isinstance(default, (int, float)) and isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise ValueError(f"Setting {name} must be a number")
    return value


def _encode(value: Any) -> tuple[str, str]:
    # bool must be checked before int: True is an int in Python.
    if isinstance(value, bool):
        return "boolean", "1" if value else "0"
    if isinstance(value, (int, float, Decimal)):
        return "number", str(value)
    if value is None:
        return "string", ""
    return "string", str(value)


def load_settings(db: Session) -> dict[str, Any]:
    values = dict(DEFAULT_SETTINGS)
    for row in db.query(Setting).all():
        values[row.setting_key] = _decode(row.setting_type, row.setting_value)
    return values


def get_setting(db: Session, key: str, default: Any = None) -> Any:
    row = db.query(Setting).filter(Setting.setting_key == key).first()
    if not row:
        return DEFAULT_SETTINGS.get(key, default)
    return _decode(row.setting_type, row.setting_value)


def get_decimal_setting(db: Session, key: str, default: Decimal) -> Decimal:
    value = get_setting(db, key, default)
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def save_settings(db: Session, values: dict[str, Any]) -> int:
    """Upsert every key with its inferred type. The caller commits."""
    changed = 0
    for key, value in values.items():
        name = str(key or "").strip()
        if not name:
            continue
        setting_type, setting_value = _encode(_coerce_known(name, value))
        row = db.query(Setting).filter(Setting.setting_key == name).first()
        if not row:
            db.add(Setting(setting_key=name, setting_value=setting_value, setting_type=setting_type))
        else:
            row.setting_value = setting_value
            row.setting_type = setting_type
        changed += 1
    return changed


def is_maintenance_mode(db: Session) -> bool:
    return _as_flag(get_setting(db, "maintenance_mode", False))
