"""Configuration constants for the SEI inbound-process crawler."""
from __future__ import annotations

import os
from pathlib import Path

DATA_DIR: Path = Path(os.getenv("SEI_CRAWLER_DATA_DIR", "data"))
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"
COOKIE_DIR: Path = DATA_DIR / "cookie_storage"
EXPORTS_DIR: Path = DATA_DIR / "exports"
DB_PATH: Path = DATA_DIR / "processos.db"

DEFAULT_PORTAL_URL: str = (
    "https://sip.pi.gov.br/sip/login.php"
    "?sigla_orgao_sistema=GOV-PI&sigla_sistema=SEI&infra_url=L3NlaS8="
)
PORTAL_URL: str = os.getenv("SEI_PORTAL_URL", DEFAULT_PORTAL_URL).strip() or DEFAULT_PORTAL_URL

# Credentials are never hardcoded; an empty value means "rely on saved cookies".
SEI_USERNAME: str = os.getenv("SEI_USERNAME", "")
SEI_PASSWORD: str = os.getenv("SEI_PASSWORD", "")
SEI_ORGAO_LABEL: str = os.getenv("SEI_ORGAO_LABEL", "SESAPI-PI")

HEADLESS: bool = os.getenv("SEI_HEADLESS", "true").strip().lower() not in {"0", "false"}

STAGING_MODE_PER_RECORD = "per_record"
STAGING_MODE_BATCH = "batch"
STAGING_MODES = (STAGING_MODE_PER_RECORD, STAGING_MODE_BATCH)
STAGING_MODE: str = (
    os.getenv("SEI_STAGING_MODE", STAGING_MODE_PER_RECORD).strip().lower()
    or STAGING_MODE_PER_RECORD
)


def _parse_timeout_seconds(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Parse a timeout value in seconds from the environment with bounds."""

    try:
        value = int(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


# Navigation timeout for page.goto calls (seconds).
NAV_TIMEOUT_SECONDS: int = _parse_timeout_seconds("SEI_NAV_TIMEOUT_SECONDS", 30)

# Fixed portal behaviour. These are not read from the environment.
SKIP_UNIT_INDEX: int = 48
NAV_MAX_ATTEMPTS: int = 3
NAV_RETRY_DELAY_SECONDS: float = 1.0
PORTAL_READY_TIMEOUT_MS: int = 5000
LIST_TABLE_TIMEOUT_MS: int = 2000
FRAME_TIMEOUT_MS: int = 2000
HISTORY_SETTLE_MS: int = 2000

COOKIES_KEY: str = "cookies"

# Column order of the processos table, excluding the surrogate id.
RECORD_COLUMNS: tuple[str, ...] = (
    "nome_processo",
    "descricao",
    "data_recebimento",
    "unidade",
    "usuario",
    "detalhes",
    "quantidade_dias",
)


def is_batch_staging(mode: str | None = None) -> bool:
    """Return ``True`` when ``mode`` (or the configured mode) promotes once per run."""

    return str(mode or STAGING_MODE).strip().lower() == STAGING_MODE_BATCH


def has_credentials() -> bool:
    """Return True if both username and password are configured."""

    return bool(SEI_USERNAME.strip() and SEI_PASSWORD)
