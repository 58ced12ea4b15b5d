"""
Application configuration and settings
"""

# Load environment variables from .env file before anything reads os.environ
from dotenv import load_dotenv
load_dotenv()

from .paths import (
    PACKAGE_DIR,
    BACKEND_DIR,
    DATA_DIR,
    JOB_DATA_DIR,
    ASSET_DIR,
)
from .constants import (
    API_TITLE,
    API_DESCRIPTION,
    API_VERSION,
    CORS_ORIGINS,
    MAX_IMAGE_BYTES,
)
from .providers import (
    GenerationProviderType,
    ProviderSettings,
    get_active_provider,
    DEFAULT_VEO_UGC_MODEL,
    DEFAULT_VEO_PROMO_MODEL,
)
from .orchestration import OrchestrationSettings

__all__ = [
    "PACKAGE_DIR",
    "BACKEND_DIR",
    "DATA_DIR",
    "JOB_DATA_DIR",
    "ASSET_DIR",
    "API_TITLE",
    "API_DESCRIPTION",
    "API_VERSION",
    "CORS_ORIGINS",
    "MAX_IMAGE_BYTES",
    "GenerationProviderType",
    "ProviderSettings",
    "get_active_provider",
    "DEFAULT_VEO_UGC_MODEL",
    "DEFAULT_VEO_PROMO_MODEL",
    "OrchestrationSettings",
]
