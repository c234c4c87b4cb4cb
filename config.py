import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default="True"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkey")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Supabase (auth + health_records table)
    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_KEY = os.getenv("SUPABASE_KEY")
    RECORDS_TABLE = os.getenv("RECORDS_TABLE", "health_records")
    USERNAME_DOMAIN = os.getenv("USERNAME_DOMAIN", "fitlogpro.app")

    # AI providers (Groq preferred, OpenAI fallback)
    GROQ_API_KEY = os.getenv("GROQ_API_KEY")
    GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    AI_TEMPERATURE = float(os.getenv("AI_TEMPERATURE", 0.7))
    AI_MAX_TOKENS = int(os.getenv("AI_MAX_TOKENS", 1000))
    INSIGHT_SYSTEM_PROMPT = os.getenv(
        "INSIGHT_SYSTEM_PROMPT",
        "你是一位专业、积极的健康顾问，只提供一般性的健康生活建议，不做医学诊断。",
    )

    # Rate limiting
    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED")
    DEFAULT_RATE_LIMIT = os.getenv("DEFAULT_RATE_LIMIT", "120 per minute")
    INSIGHT_RATE_LIMIT = os.getenv("INSIGHT_RATE_LIMIT", "5 per minute")
