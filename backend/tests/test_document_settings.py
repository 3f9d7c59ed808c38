from dataclasses import FrozenInstanceError

import pytest

from models import db, AppSetting
from services.document_settings import (
    DocumentSettings, DEFAULT_SETTINGS, APP_SETTINGS_KEY,
    resolve_document_settings, load_persisted_settings, settings_for_request,
)

PERSISTED = {
    'invoice': {'fontFamily': 'Calibri', 'fontSize': 12, 'fontColor': '#111111'},
    'company': {'name': 'Persisted Co', 'phone': '+880 1', 'email': 'hello@persisted.test'},
    'dateFormat': {'format': 'US', 'showPrefix': False},
}


def test_defaults_cover_every_field():
    settings = resolve_document_settings()
    assert settings == DEFAULT_SETTINGS
    assert settings.company_name == 'AMK Enterprise'
    assert settings.font_size == 11
    assert settings.date_format == 'BD'
    assert settings.pad_opacity == 0.15


def test_persisted_values_override_defaults():
    settings = resolve_document_settings(None, PERSISTED)
    assert settings.font_family == 'Calibri'
    assert settings.company_name == 'Persisted Co'
    assert settings.date_format == 'US'
    assert settings.date_show_prefix is False
    assert settings.company_tagline == DEFAULT_SETTINGS.company_tagline


def test_request_overrides_beat_persisted_values():
    settings = resolve_document_settings({'companyName': 'Override Ltd', 'fontSize': '14'}, PERSISTED)
    assert settings.company_name == 'Override Ltd'
    assert settings.font_size == 14.0
    assert settings.font_family == 'Calibri'


def test_invalid_values_fall_through_to_next_layer():
    settings = resolve_document_settings(
        {'fontColor': 'red', 'padOpacity': 3, 'dateFormat': 'ISO'},
        {'invoice': {'fontColor': 'not-a-colour'}, 'pad': {'opacity': 0.5}},
    )
    assert settings.font_color == DEFAULT_SETTINGS.font_color
    assert settings.pad_opacity == 0.5
    assert settings.date_format == 'BD'


def test_malformed_persisted_sections_are_ignored():
    settings = resolve_document_settings(None, {'invoice': 'oops', 'company': None})
    assert settings == DEFAULT_SETTINGS


def test_settings_are_immutable():
    with pytest.raises(FrozenInstanceError):
        DEFAULT_SETTINGS.font_size = 20


def test_colour_without_hash_is_normalized():
    assert resolve_document_settings({'fontColor': '336699'}).font_color == '#336699'


def test_load_persisted_settings(app):
    assert load_persisted_settings() == {}

    setting = AppSetting(key=APP_SETTINGS_KEY)
    setting.set_value(PERSISTED)
    db.session.add(setting)
    db.session.commit()

    assert load_persisted_settings() == PERSISTED
    assert settings_for_request({'fontSize': 9}).company_name == 'Persisted Co'


def test_unreachable_store_falls_back_to_defaults(app):
    db.drop_all()
    assert load_persisted_settings() == {}
    assert settings_for_request({}) == DocumentSettings()
