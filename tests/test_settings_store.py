from decimal import Decimal

from smm_panel.models import Setting
from smm_panel.services.settings_store import (
    get_decimal_setting,
    is_maintenance_mode,
    load_settings,
    save_settings,
)


def test_save_settings_infers_types(db_session):
    save_settings(db_session, {"currency": "EUR", "maintenance_mode": False, "min_deposit": 2.5, "  ": "skip"})
    db_session.commit()

    values = load_settings(db_session)

    assert values["currency"] == "EUR"
    assert values["maintenance_mode"] is False
    assert values["min_deposit"] == 2.5
    assert "  " not in values
    assert get_decimal_setting(db_session, "min_deposit", Decimal("5")) == Decimal("2.5")


def test_save_settings_overwrites_existing(db_session):
    save_settings(db_session, {"maintenance_mode": False})
    db_session.commit()
    save_settings(db_session, {"maintenance_mode": True})
    db_session.commit()

    assert is_maintenance_mode(db_session) is True


def test_defaults_without_rows(db_session):
    assert is_maintenance_mode(db_session) is False
    assert load_settings(db_session)["site_name"] == "SMM WebPanel"


def test_string_flags_follow_their_default_type(db_session):
    save_settings(db_session, {"maintenance_mode": "false"})
    db_session.commit()
    assert is_maintenance_mode(db_session) is False

    save_settings(db_session, {"maintenance_mode": "0"})
    db_session.commit()
    assert is_maintenance_mode(db_session) is False

    save_settings(db_session, {"maintenance_mode": "Yes"})
    db_session.commit()
    assert is_maintenance_mode(db_session) is True
    assert load_settings(db_session)["maintenance_mode"] is True


def test_string_row_for_flag_is_not_truthy(db_session):
    db_session.add(Setting(setting_key="maintenance_mode", setting_value="false", setting_type="string"))
    db_session.commit()

    assert is_maintenance_mode(db_session) is False
