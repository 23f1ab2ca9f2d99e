"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import timedelta
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import BusinessCalendar, ServiceSpec


class CalendarConfig(BaseModel):
    """Opening rules of the salon."""
    open_hour: int = 9
    close_hour: int = 18
    working_weekdays: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5, 6])  # 0=Sunday
    slot_interval_minutes: int = 30
    minimum_lead_minutes: int = 30

    @field_validator("open_hour")
    @classmethod
    def validate_open_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("close_hour")
    @classmethod
    def validate_close_hour(cls, v: int) -> int:
        """Validate hour is between 1 and 24 (24 closes at midnight)."""
        if not 1 <= v <= 24:
            raise ValueError(f"Hour must be between 1 and 24, got {v}")
        return v

    @field_validator("slot_interval_minutes")
    @classmethod
    def validate_interval(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("slot_interval_minutes must be greater than zero")
        return value

    @field_validator("minimum_lead_minutes")
    @classmethod
    def validate_lead(cls, value: int) -> int:
        if value < 0:
            raise ValueError("minimum_lead_minutes must not be negative")
        return value

    @field_validator("working_weekdays")
    @classmethod
    def validate_working_weekdays(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range and deduplicated."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"working_weekdays must be between 0 and 6, got {invalid_days}")
        return sorted(set(value))

    @model_validator(mode="after")
    def validate_hours_order(self) -> "CalendarConfig":
        """Ensure the salon opens before it closes."""
        if self.close_hour <= self.open_hour:
            raise ValueError("close_hour must be later than open_hour")
        return self


class ServiceConfig(BaseModel):
    """Grooming service offered by the salon."""
    id: int
    name: str
    duration_minutes: int
    price: float = 0.0

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure service duration is positive."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    def to_service_spec(self) -> ServiceSpec:
        return ServiceSpec(
            id=self.id,
            duration_minutes=self.duration_minutes,
            name=self.name,
            price=self.price,
        )


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "America/Sao_Paulo"
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    reschedule_notice_hours: int = 24
    max_offered_slots: Optional[int] = 12
    bookings_file: Optional[Path] = None
    services: List[ServiceConfig] = Field(default_factory=list)

    @field_validator("reschedule_notice_hours")
    @classmethod
    def validate_notice(cls, value: int) -> int:
        if value < 0:
            raise ValueError("reschedule_notice_hours must not be negative")
        return value

    @field_validator("max_offered_slots")
    @classmethod
    def validate_max_offered(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("max_offered_slots must be greater than zero")
        return value

    @field_validator("services")
    @classmethod
    def validate_services(cls, value: List[ServiceConfig]) -> List[ServiceConfig]:
        """Ensure service ids are unique."""
        seen_ids: set[int] = set()
        for service in value:
            if service.id in seen_ids:
                raise ValueError(f"Duplicate service id detected: {service.id}")
            seen_ids.add(service.id)
        return value

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

        config = cls(**data)

        # Relative bookings paths are resolved against the config file
        if config.bookings_file is not None and not config.bookings_file.is_absolute():
            config.bookings_file = config_path.parent / config.bookings_file

        return config

    def to_business_calendar(self) -> BusinessCalendar:
        """Build the engine's calendar rules from this configuration."""
        return BusinessCalendar(
            open_hour=self.calendar.open_hour,
            close_hour=self.calendar.close_hour,
            working_weekdays=frozenset(self.calendar.working_weekdays),
            slot_interval_minutes=self.calendar.slot_interval_minutes,
            minimum_lead_minutes=self.calendar.minimum_lead_minutes,
            timezone=self.timezone,
        )

    def reschedule_notice(self) -> timedelta:
        return timedelta(hours=self.reschedule_notice_hours)

    def service_specs(self) -> List[ServiceSpec]:
        return [service.to_service_spec() for service in self.services]


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
