import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str] = None
    database_name: str = "shop"
    supabase_url: str = ""
    supabase_key: str = ""
    stripe_secret_key: str = ""
    admin_email: str = ""
    site_url: str = "http://localhost:8000"
    currency: str = "brl"
    card_installments: bool = True
    low_stock_threshold: int = 5
    log_level: str = "INFO"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        port = int(os.getenv("PORT", 8000))
        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            database_name=os.getenv("DATABASE_NAME", "shop"),
            supabase_url=os.getenv("SUPABASE_URL", ""),
            supabase_key=os.getenv("SUPABASE_KEY", ""),
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY", ""),
            admin_email=os.getenv("ADMIN_EMAIL", ""),
            site_url=os.getenv("SITE_URL", f"http://localhost:{port}"),
            currency=os.getenv("CURRENCY", "brl").lower(),
            card_installments=os.getenv("CARD_INSTALLMENTS", "true").lower() in ("1", "true", "yes"),
            low_stock_threshold=int(os.getenv("LOW_STOCK_THRESHOLD", 5)),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            port=port,
        )
