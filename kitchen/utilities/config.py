"""Configuration management for the Cloud Kitchen order insights service."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# OpenAI Configuration
OPENAI_API_KEY: Final[str] = os.getenv('OPENAI_API_KEY', '')
OPENAI_MODEL: Final[str] = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO').upper()

# Delivery platform cut applied to gross revenue
COMMISSION_RATE: Final[float] = float(os.getenv('COMMISSION_RATE', '0.35'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = BASE_DIR / 'data'
STORAGE_FILE: Final[Path] = Path(os.getenv('KITCHEN_STORAGE_FILE', str(DATA_DIR / 'storage.json')))
# 0 disables the quota check
STORAGE_QUOTA: Final[int] = int(os.getenv('KITCHEN_STORAGE_QUOTA', str(5 * 1024 * 1024)))
