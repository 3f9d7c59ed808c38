# backend/services/document_settings.py
"""
Document style and content settings.

Every field is resolved through a fixed precedence: an explicit per-request
override, then the persisted application settings, then the defaults below.
The resolved record is frozen and passed explicitly to the builder and the
renderers.
"""
import re
import logging
from dataclasses import dataclass, fields, asdict

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

APP_SETTINGS_KEY = 'appSettings'

HEX_COLOR = re.compile(r'^#?[0-9a-fA-F]{6}$')


@dataclass(frozen=True)
class DocumentSettings:
    font_family: str = 'Segoe UI'
    font_size: float = 11
    font_color: str = '#1f2937'
    top_margin: float = 20
    bottom_margin: float = 20
    company_name: str = 'AMK Enterprise'
    company_tagline: str = 'General Order & Supplier'
    company_email: str = 'info@amkenterprise.com'
    company_phone: str = '+880 2 222 111 333'
    pad_enabled: bool = False
    pad_opacity: float = 0.15
    pad_image: str = '/images/AMK_PAD_A4.png'
    signature_enabled: bool = False
    signature_width: float = 120
    signature_height: float = 60
    signature_image: str = '/images/Sig_Seal.png'
    date_format: str = 'BD'
    date_show_prefix: bool = True
    date_prefix_text: str = 'Date: '
    currency_symbol: str = 'Tk'
    measurement_color: str = '#059669'
    table_border_color: str = '#d1d5db'

    def to_dict(self):
        return asdict(self)


DEFAULT_SETTINGS = DocumentSettings()


def _to_str(value):
    if not isinstance(value, str):
        raise ValueError(f"expected text, got {type(value).__name__}")
    return value


def _to_number(value):
    if isinstance(value, bool):
        raise ValueError("expected a number, got a boolean")
    return float(value)


def _to_bool(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ('true', 'false', '1', '0'):
        return value.lower() in ('true', '1')
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    raise ValueError(f"expected a boolean, got {value!r}")


def _to_color(value):
    value = _to_str(value).strip()
    if not HEX_COLOR.match(value):
        raise ValueError(f"invalid hex colour {value!r}")
    return value if value.startswith('#') else f"#{value}"


def _to_opacity(value):
    number = _to_number(value)
    if not 0 <= number <= 1:
        raise ValueError(f"opacity {number} outside [0, 1]")
    return number


def _to_positive(value):
    number = _to_number(value)
    if number <= 0:
        raise ValueError(f"expected a positive number, got {number}")
    return number


def _to_margin(value):
    number = _to_number(value)
    if number < 0:
        raise ValueError(f"negative margin {number}")
    return number


def _to_date_format(value):
    value = _to_str(value).upper()
    if value not in ('US', 'BD'):
        raise ValueError(f"unknown date format {value!r}")
    return value


# field -> (request override key, persisted (section, key), coercion)
FIELD_SOURCES = {
    'font_family': ('fontFamily', ('invoice', 'fontFamily'), _to_str),
    'font_size': ('fontSize', ('invoice', 'fontSize'), _to_positive),
    'font_color': ('fontColor', ('invoice', 'fontColor'), _to_color),
    'top_margin': ('topMargin', ('invoice', 'topMargin'), _to_margin),
    'bottom_margin': ('bottomMargin', ('invoice', 'bottomMargin'), _to_margin),
    'company_name': ('companyName', ('company', 'name'), _to_str),
    'company_tagline': ('companyTagline', ('company', 'tagline'), _to_str),
    'company_email': ('companyEmail', ('company', 'email'), _to_str),
    'company_phone': ('companyPhone', ('company', 'phone'), _to_str),
    'pad_enabled': ('padEnabled', ('pad', 'enabled'), _to_bool),
    'pad_opacity': ('padOpacity', ('pad', 'opacity'), _to_opacity),
    'pad_image': ('padImageUrl', ('pad', 'imageUrl'), _to_str),
    'signature_enabled': ('signatureEnabled', ('signature', 'enabled'), _to_bool),
    'signature_width': ('signatureWidth', ('signature', 'width'), _to_positive),
    'signature_height': ('signatureHeight', ('signature', 'height'), _to_positive),
    'signature_image': ('signatureImageUrl', ('signature', 'imageUrl'), _to_str),
    'date_format': ('dateFormat', ('dateFormat', 'format'), _to_date_format),
    'date_show_prefix': ('dateShowPrefix', ('dateFormat', 'showPrefix'), _to_bool),
    'date_prefix_text': ('datePrefixText', ('dateFormat', 'prefixText'), _to_str),
    'currency_symbol': ('currencySymbol', ('company', 'currencySymbol'), _to_str),
    'measurement_color': ('measurementColor', ('invoice', 'measurementColor'), _to_color),
    'table_border_color': ('tableBorderColor', ('invoice', 'tableBorderColor'), _to_color),
}


def _persisted_value(persisted, path):
    section, key = path
    block = persisted.get(section)
    if not isinstance(block, dict):
        return None
    return block.get(key)


def resolve_document_settings(overrides=None, persisted=None):
    """
    Build a DocumentSettings from request overrides and persisted settings.

    Missing or invalid values at one layer fall through to the next, so the
    result always has a valid value for every field.
    """
    overrides = overrides or {}
    persisted = persisted if isinstance(persisted, dict) else {}
    resolved = {}

    for field in fields(DocumentSettings):
        override_key, persisted_path, coerce = FIELD_SOURCES[field.name]
        candidates = (
            ('override', overrides.get(override_key)),
            ('persisted', _persisted_value(persisted, persisted_path)),
        )
        value = getattr(DEFAULT_SETTINGS, field.name)
        for layer, candidate in candidates:
            if candidate is None:
                continue
            try:
                value = coerce(candidate)
                break
            except (TypeError, ValueError) as e:
                logger.warning(f"Ignoring {layer} setting {field.name}={candidate!r}: {e}")
        resolved[field.name] = value

    return DocumentSettings(**resolved)


def load_persisted_settings():
    """
    Read the persisted application settings blob.

    Returns an empty dict when the store is unreachable or the value is
    unusable; document generation then runs on defaults.
    """
    from models import db, AppSetting

    try:
        setting = AppSetting.query.filter_by(key=APP_SETTINGS_KEY).first()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.warning(f"Settings store unavailable, using defaults: {e}")
        return {}

    if not setting:
        return {}

    value = setting.get_value()
    if not isinstance(value, dict):
        logger.warning(f"Stored {APP_SETTINGS_KEY} is not an object, using defaults")
        return {}
    return value


def settings_for_request(payload):
    """Settings for one document request: request body overrides + persisted + defaults"""
    return resolve_document_settings(payload, load_persisted_settings())
