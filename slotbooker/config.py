"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from datetime import time
from pathlib import Path
from typing import List, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import WorkingHours
from .domain.slot_calculator import SlotCalculator


CLIENT_EMAIL_ENV = "GOOGLE_CALENDAR_CLIENT_EMAIL"
PRIVATE_KEY_ENV = "GOOGLE_CALENDAR_PRIVATE_KEY"
DELEGATED_USER_ENV = "GOOGLE_CALENDAR_DELEGATED_USER"


class ScheduleConfig(BaseModel):
    """Calendar and business-hours settings shared by all operations."""
    calendar_id: str = "primary"
    timezone: str = "Asia/Seoul"
    slot_duration_minutes: int = 30
    start_hour: int = 10
    end_hour: int = 18
    working_days: List[int] = Field(default_factory=lambda: [0, 1, 2, 3, 4])  # Monday-Friday
    buffer_minutes: int = 15
    booking_window_days: int = 14

    model_config = {"frozen": True}

    @field_validator("calendar_id")
    @classmethod
    def validate_calendar_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("calendar_id must not be empty")
        return value.strip()

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone name resolves."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("slot_duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure slot duration is positive."""
        if value <= 0:
            raise ValueError("slot_duration_minutes must be greater than zero")
        return value

    @field_validator("buffer_minutes")
    @classmethod
    def validate_buffer(cls, value: int) -> int:
        if value < 0:
            raise ValueError("buffer_minutes must not be negative")
        return value

    @field_validator("booking_window_days")
    @classmethod
    def validate_booking_window(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("booking_window_days must be greater than zero")
        return value

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range and deduplicated."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"working_days must be between 0 and 6, got {invalid_days}")
        if not value:
            raise ValueError("working_days must contain at least one weekday")
        # Preserve order while removing duplicates
        seen: set[int] = set()
        deduped: List[int] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        return deduped

    @model_validator(mode="after")
    def validate_hours_order(self) -> "ScheduleConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def get_start_time(self) -> time:
        """Get start time as time object."""
        return time(hour=self.start_hour, minute=0)

    def get_end_time(self) -> time:
        """Get end time as time object."""
        return time(hour=self.end_hour, minute=0)

    def working_hours(self) -> WorkingHours:
        return WorkingHours(
            start_time=self.get_start_time(),
            end_time=self.get_end_time(),
            working_days=list(self.working_days),
            timezone=self.timezone
        )

    def slot_calculator(self) -> SlotCalculator:
        return SlotCalculator(
            working_hours=self.working_hours(),
            slot_duration_minutes=self.slot_duration_minutes,
            buffer_minutes=self.buffer_minutes,
            booking_window_days=self.booking_window_days
        )


class ReminderConfig(BaseModel):
    """A single reminder override on created events."""
    method: str
    minutes: int

    model_config = {"frozen": True}

    @field_validator("method")
    @classmethod
    def validate_method(cls, value: str) -> str:
        if value not in ("email", "popup"):
            raise ValueError(f"Reminder method must be 'email' or 'popup', got {value!r}")
        return value

    @field_validator("minutes")
    @classmethod
    def validate_minutes(cls, value: int) -> int:
        if value < 0:
            raise ValueError("Reminder minutes must not be negative")
        return value


def _default_reminders() -> List[ReminderConfig]:
    return [
        ReminderConfig(method="email", minutes=60),
        ReminderConfig(method="popup", minutes=30),
    ]


class BookingConfig(BaseModel):
    """How booked events look in the calendar."""
    summary_template: str = "[Coffee chat] {name}"
    description_footer: str = "This booking was created automatically through the website."
    request_id_prefix: str = "coffee-chat"
    conference: bool = True
    reminders: List[ReminderConfig] = Field(default_factory=_default_reminders)
    require_slot_match: bool = False

    model_config = {"frozen": True}

    @field_validator("summary_template")
    @classmethod
    def validate_summary_template(cls, value: str) -> str:
        """Only the {name} placeholder is supported."""
        try:
            value.format(name="")
        except (KeyError, IndexError, ValueError) as exc:
            raise ValueError(f"Invalid summary_template: {exc}") from exc
        return value


class ServiceAccountConfig(BaseModel):
    """Service-account credential material for the Google Calendar API."""
    client_email: str
    private_key: str
    delegated_user: Optional[str] = None  # needed to invite attendees on Workspace domains

    @field_validator("client_email")
    @classmethod
    def validate_client_email(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("client_email must be a service-account email address")
        return value

    @field_validator("private_key")
    @classmethod
    def normalize_private_key(cls, value: str) -> str:
        """Environment variables often carry the PEM newlines escaped."""
        value = value.replace("\\n", "\n").strip()
        if not value:
            raise ValueError("private_key must not be empty")
        return value + "\n"

    @classmethod
    def from_env(cls) -> Optional["ServiceAccountConfig"]:
        """
        Build credentials from the environment.

        Returns:
            ServiceAccountConfig, or None when neither variable is set

        Raises:
            ValueError: If only one variable is set or a value is invalid
        """
        client_email = os.environ.get(CLIENT_EMAIL_ENV)
        private_key = os.environ.get(PRIVATE_KEY_ENV)

        if not client_email and not private_key:
            return None

        if not client_email or not private_key:
            raise ValueError(
                f"Both {CLIENT_EMAIL_ENV} and {PRIVATE_KEY_ENV} must be set."
            )

        return cls(
            client_email=client_email,
            private_key=private_key,
            delegated_user=os.environ.get(DELEGATED_USER_ENV) or None
        )


class AppConfig(BaseModel):
    """Application configuration."""
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    booking: BookingConfig = Field(default_factory=BookingConfig)
    credentials: Optional[ServiceAccountConfig] = None
    request_timeout_seconds: float = 30.0

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout_seconds must be greater than zero")
        return value

    def resolve_credentials(self) -> ServiceAccountConfig:
        """
        Return the credentials from the config file or the environment.

        Raises:
            ValueError: If no credential material is available
        """
        if self.credentials is not None:
            return self.credentials

        credentials = ServiceAccountConfig.from_env()
        if credentials is None:
            raise ValueError(
                "No service-account credentials configured. "
                f"Set {CLIENT_EMAIL_ENV} and {PRIVATE_KEY_ENV} "
                "or add a 'credentials' block to the config file."
            )
        return credentials

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
