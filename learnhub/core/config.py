"""
LearnHub Configuration
Database, auth, reward and notification settings
"""

import os

# MongoDB
MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "learnhub_db")
MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

# Auth (token issuance lives in the auth service, we only verify)
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Public verification page for certificates
CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:3000")

# Referral rewards
REFERRAL_REWARD_POINTS = int(os.getenv("REFERRAL_REWARD_POINTS", "10"))

# Identifier generation retry budget
ID_GENERATION_MAX_ATTEMPTS = int(os.getenv("ID_GENERATION_MAX_ATTEMPTS", "10"))

# Notifications (unset webhook -> log only)
NOTIFY_WEBHOOK_URL = os.getenv("NOTIFY_WEBHOOK_URL")
NOTIFY_TIMEOUT_SECONDS = float(os.getenv("NOTIFY_TIMEOUT_SECONDS", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
