"""
Settings for PhotoTools POS, read from the environment.

A .env file at the project root is loaded first when present, so local
runs, Docker and Cloud Run use the same variable names.
"""
import os
import tempfile
from pathlib import Path
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent

_dotenv_path = PROJECT_ROOT / '.env'
if _dotenv_path.exists():
    load_dotenv(_dotenv_path)


def get_writable_path(folder_name: str) -> str:
    """
    Folder for runtime files such as exports.

    ``<NAME>_FOLDER`` overrides the location (relative paths are taken from
    the project root). Falls back to the system temp dir when the project
    tree is read-only.
    """
    override = os.getenv(f"{folder_name.upper()}_FOLDER")
    path = Path(override) if override else Path(folder_name)
    if not path.is_absolute():
        path = PROJECT_ROOT / path

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        path = Path(tempfile.gettempdir()) / 'photo_tools' / folder_name
        path.mkdir(parents=True, exist_ok=True)
    return str(path)


# ═══════════════════════════════════════════════════════════════════
# STORAGE
# ═══════════════════════════════════════════════════════════════════

# Directory holding products.json and orders.json
DATA_DIR = os.getenv('DATA_DIR') or get_writable_path('data')
PRODUCTS_FILE_NAME = os.getenv('PRODUCTS_FILE_NAME', 'products.json')
ORDERS_FILE_NAME = os.getenv('ORDERS_FILE_NAME', 'orders.json')

EXPORT_FOLDER = get_writable_path('exports')

# ═══════════════════════════════════════════════════════════════════
# MONITORING
# ═══════════════════════════════════════════════════════════════════

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_DIR = os.getenv('LOG_DIR', str(PROJECT_ROOT / 'logs'))
LOG_FILE_MAX_MB = int(os.getenv('LOG_FILE_MAX_MB', '10'))
LOG_FILE_BACKUP_COUNT = int(os.getenv('LOG_FILE_BACKUP_COUNT', '5'))

# ═══════════════════════════════════════════════════════════════════
# REST API (FastAPI)
# ═══════════════════════════════════════════════════════════════════

API_PORT = int(os.getenv('API_PORT', '3000'))
API_HOST = os.getenv('API_HOST', '0.0.0.0')

# Cloud Run sets PORT to the single port it routes traffic to
_cloud_run_port = os.getenv('PORT')
if _cloud_run_port:
    API_PORT = int(_cloud_run_port)

# CORS configuration (comma-separated origins)
API_CORS_ORIGINS = os.getenv('API_CORS_ORIGINS', '*').split(',')

# Optional static front-end served at "/" when the folder exists
STATIC_DIR = os.getenv('STATIC_DIR', str(PROJECT_ROOT / 'public'))

# In-memory order drafts: idle drafts are dropped, and the oldest go first
# once the cap is reached
DRAFT_MAX_OPEN = int(os.getenv('DRAFT_MAX_OPEN', '200'))
DRAFT_IDLE_MINUTES = int(os.getenv('DRAFT_IDLE_MINUTES', '240'))

# ═══════════════════════════════════════════════════════════════════
# SMS RELAY
# ═══════════════════════════════════════════════════════════════════

FEATURE_SMS_ENABLED = os.getenv('FEATURE_SMS_ENABLED', 'true').lower() == 'true'
SMS_DEFAULT_PROVIDER = os.getenv('SMS_DEFAULT_PROVIDER', 'payamak-vip')
SMS_TIMEOUT_SECONDS = int(os.getenv('SMS_TIMEOUT_SECONDS', '10'))
PAYAMAK_VIP_BASE_URL = os.getenv(
    'PAYAMAK_VIP_BASE_URL', 'http://www.payamak.vip/api/v1/RestWebApi/'
)
NIAZPARDAZ_URL = os.getenv(
    'NIAZPARDAZ_URL', 'https://panel.niazpardaz-sms.com/SMSInOutBox/SendSms'
)


def validate_config():
    """Validate that all required configuration is present"""
    errors = []

    if not 0 < API_PORT < 65536:
        errors.append(f"API_PORT out of range: {API_PORT}")

    if SMS_DEFAULT_PROVIDER not in ('payamak-vip', 'niazpardaz'):
        errors.append(f"Unknown SMS_DEFAULT_PROVIDER: {SMS_DEFAULT_PROVIDER}")

    if DRAFT_MAX_OPEN <= 0:
        errors.append("DRAFT_MAX_OPEN must be positive")

    if SMS_TIMEOUT_SECONDS <= 0:
        errors.append("SMS_TIMEOUT_SECONDS must be positive")

    if not DATA_DIR:
        errors.append("DATA_DIR is not set")

    if errors:
        raise ValueError("Configuration errors:\n" + "\n".join(errors))

    return True


if __name__ == "__main__":
    try:
        validate_config()
        print("[OK] Configuration validated successfully")
    except ValueError as e:
        print(f"[FAIL] Configuration validation failed:\n{e}")
