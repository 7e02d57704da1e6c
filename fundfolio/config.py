# fundfolio/config.py
"""
Runtime settings, read from the environment (and a local .env file).

Environment:
    FUNDFOLIO_BASE_CSV_URL=<url of the base fund sheet>
    FUNDFOLIO_JSONBIN_BIN_ID=<bin id>     # remote portfolio storage
    FUNDFOLIO_JSONBIN_API_KEY=<key>
"""

import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


CDN_DATA_URL = "https://cdn.jsdelivr.net/gh/Roshan4665/personalportfolioanalyser/data"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


@dataclass(frozen=True)
class Settings:
    base_csv_url: str = f"{CDN_DATA_URL}/mutual_funds.csv"
    supplement_1_csv_url: str = f"{CDN_DATA_URL}/mutual_funds_supplement_1.csv"
    supplement_2_csv_url: str = f"{CDN_DATA_URL}/mutual_funds_supplement_2.csv"
    default_portfolio_url: str = f"{CDN_DATA_URL}/my_funds.json"
    jsonbin_bin_id: Optional[str] = None
    jsonbin_api_key: Optional[str] = None
    jsonbin_base_url: str = "https://api.jsonbin.io/v3"
    portfolio_file: str = "fundfolio_portfolio.json"
    save_debounce_seconds: float = 1.5
    request_timeout_seconds: int = 15
    forecast_years: int = 20

    @property
    def csv_sources(self) -> List[Tuple[str, str]]:
        """(source name, url) in merge priority order; blank URLs are left out."""
        sources = [
            ("base", self.base_csv_url),
            ("supplement_1", self.supplement_1_csv_url),
            ("supplement_2", self.supplement_2_csv_url),
        ]
        return [(name, url) for name, url in sources if url and url.strip()]

    @property
    def use_remote_store(self) -> bool:
        return bool(self.jsonbin_bin_id and self.jsonbin_api_key)


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        base_csv_url=os.getenv("FUNDFOLIO_BASE_CSV_URL", defaults.base_csv_url),
        supplement_1_csv_url=os.getenv("FUNDFOLIO_SUPPLEMENT_1_CSV_URL", defaults.supplement_1_csv_url),
        supplement_2_csv_url=os.getenv("FUNDFOLIO_SUPPLEMENT_2_CSV_URL", defaults.supplement_2_csv_url),
        default_portfolio_url=os.getenv("FUNDFOLIO_DEFAULT_PORTFOLIO_URL", defaults.default_portfolio_url),
        jsonbin_bin_id=os.getenv("FUNDFOLIO_JSONBIN_BIN_ID") or None,
        jsonbin_api_key=os.getenv("FUNDFOLIO_JSONBIN_API_KEY") or None,
        jsonbin_base_url=os.getenv("FUNDFOLIO_JSONBIN_BASE_URL", defaults.jsonbin_base_url),
        portfolio_file=os.getenv("FUNDFOLIO_PORTFOLIO_FILE", defaults.portfolio_file),
        save_debounce_seconds=_env_float("FUNDFOLIO_SAVE_DEBOUNCE_SECONDS", defaults.save_debounce_seconds),
        request_timeout_seconds=_env_int("FUNDFOLIO_REQUEST_TIMEOUT_SECONDS", defaults.request_timeout_seconds),
        forecast_years=_env_int("FUNDFOLIO_FORECAST_YEARS", defaults.forecast_years),
    )
