"""
Application configuration loaded from environment variables
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tripbook.db")

# JWT
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-please-change-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Anti-abuse cap on conversation threads
CONTACT_LIMIT = int(os.getenv("CONTACT_LIMIT", "20"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Mail
MAIL_ENABLED = os.getenv("MAIL_ENABLED", "false").strip().lower() in {"1", "true", "yes", "on"}
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
