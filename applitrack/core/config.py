import os

# ✅ Database (key-value storage backing)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///applitrack.db")

# ✅ Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")
