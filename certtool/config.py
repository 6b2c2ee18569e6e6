import os
import logging
from dotenv import load_dotenv

# Load variables from .env
load_dotenv()

# Default credential for the inference API (the operator can override it per session)
HF_TOKEN = os.getenv("HF_TOKEN")

# Models
TEXT_MODEL_ID = os.getenv("TEXT_MODEL_ID", "meta-llama/Llama-3.2-3B-Instruct")
VISION_MODEL_ID = os.getenv("VISION_MODEL_ID", "meta-llama/Llama-3.2-11B-Vision-Instruct")
MAX_TOKENS = int(os.getenv("MAX_TOKENS", 4096))

# Retry policy for the extraction call
MAX_ATTEMPTS = int(os.getenv("MAX_ATTEMPTS", 3))
RETRY_DELAY_SECONDS = float(os.getenv("RETRY_DELAY_SECONDS", 1.0))

# Upload limits
MAX_FILE_SIZE_MB = int(os.getenv("MAX_FILE_SIZE_MB", 10))
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
ALLOWED_MIME_TYPES = ("application/pdf", "image/png", "image/jpeg")

EXPORT_FILE_NAME = "GameCertificatesByProvider.zip"

# Streamlit console -> FastAPI backend (same Space, port 7860)
API_URL = os.getenv("API_URL", "http://localhost:7860")

# Logging Format
LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(module)s:%(funcName)s:%(lineno)d] - %(message)s'
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

if not HF_TOKEN:
    logging.getLogger(__name__).warning("HF_TOKEN not set; an API key must be entered before processing files.")
