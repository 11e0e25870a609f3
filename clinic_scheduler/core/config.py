import os

from dotenv import load_dotenv

from clinic_scheduler.scheduling.rules import SchedulingRules


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinic.db")

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:5173"])

LIFECYCLE_SCHEDULER_ENABLED = _get_bool(os.getenv("LIFECYCLE_SCHEDULER_ENABLED"), default=True)
LIFECYCLE_INTERVAL_SECONDS = int(os.getenv("LIFECYCLE_INTERVAL_SECONDS", "60"))

DEFAULT_APPOINTMENT_DURATION_MINUTES = int(os.getenv("DEFAULT_APPOINTMENT_DURATION_MINUTES", "30"))
SLOT_INTERVAL_MINUTES = int(os.getenv("SLOT_INTERVAL_MINUTES", "30"))


def validate_runtime_config() -> None:
    if LIFECYCLE_INTERVAL_SECONDS <= 0:
        raise RuntimeError("LIFECYCLE_INTERVAL_SECONDS must be positive.")
    if DEFAULT_APPOINTMENT_DURATION_MINUTES < 5:
        raise RuntimeError("DEFAULT_APPOINTMENT_DURATION_MINUTES must be at least 5.")
    if SLOT_INTERVAL_MINUTES <= 0:
        raise RuntimeError("SLOT_INTERVAL_MINUTES must be positive.")
    if APP_ENV.lower() == "production" and DATABASE_URL.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must point to Postgres in production.")


def build_rules() -> SchedulingRules:
    return SchedulingRules(
        default_duration_minutes=DEFAULT_APPOINTMENT_DURATION_MINUTES,
        slot_interval_minutes=SLOT_INTERVAL_MINUTES,
    )
