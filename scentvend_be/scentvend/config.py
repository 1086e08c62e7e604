import os
from functools import lru_cache

from dotenv import load_dotenv, find_dotenv

# A .env next to the working directory fills in variables the environment leaves unset
_env_path = find_dotenv(usecwd=True)
if _env_path:
    load_dotenv(_env_path, override=False)


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./scentvend.db")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change_me_secret")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    # Single kiosk operator account; placeholder until real admin accounts exist
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin")
    ADMIN_SESSION_HOURS: int = int(os.getenv("ADMIN_SESSION_HOURS", "24"))
    # Payment gateway keys; with no secret the gateway runs in test mode
    PAYMENT_KEY_ID: str = os.getenv("PAYMENT_KEY_ID", "")
    PAYMENT_KEY_SECRET: str = os.getenv("PAYMENT_KEY_SECRET", "")
    PAYMENT_CURRENCY: str = os.getenv("PAYMENT_CURRENCY", "INR")
    # Physical capacity of one bottle variant in the machine
    BOTTLE_STOCK_LIMIT: int = int(os.getenv("BOTTLE_STOCK_LIMIT", "20"))


@lru_cache
def get_settings():
    return Settings()
