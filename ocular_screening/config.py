"""
Configuration Management for the Ocular Screening Pipeline

Environment-based configuration using Pydantic Settings.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict, model_validator
from functools import lru_cache


class Settings(BaseSettings):
    """Pipeline settings loaded from environment variables (prefix OCULAR_)."""

    model_config = ConfigDict(
        env_prefix="OCULAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_name: str = "Ocular Screening Pipeline"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level for configure_logging()")

    # Frame timing (nominal, never measured)
    frame_interval_s: float = Field(default=1.0 / 60.0, gt=0, description="Assumed inter-frame interval")
    reference_frame_width_px: int = Field(default=640, gt=0, description="Pixel width used to scale normalized movement")

    # History
    history_capacity: int = Field(default=60, ge=1, description="Max samples kept in the rolling history")
    min_history_for_assessment: int = Field(default=30, ge=1, description="Samples required before classification runs")

    # Event detection
    blink_threshold: float = Field(default=0.15, description="Average EAR below this is a blink")
    saccade_velocity_threshold: float = Field(default=300.0, description="px/s")
    saccade_min_movement: float = Field(default=0.01, description="Normalized pupil displacement")
    saccade_refractory_s: float = Field(default=0.100, description="Debounce between flagged saccades")
    fixation_movement_threshold: float = Field(default=0.005, description="Movement below this counts as fixation")

    # Gaze stability
    gaze_stability_window: int = 10
    gaze_stability_min_samples: int = 3
    gaze_stability_default: float = 0.8
    gaze_variance_normalizer: float = 0.02

    # Screen gaze mapping
    screen_gaze_gain: float = 2.5
    calibration_range: float = Field(default=0.2, gt=0, description="Gaze offset mapped to the screen edge after calibration")

    # Sample confidence
    face_confidence: float = 0.85
    no_face_confidence: float = 0.3

    # Optional narration step
    enable_enhancement: bool = Field(default=False, description="Run the narration decorator after each assessment")
    enhancement_timeout_s: float = Field(default=10.0, description="Upper bound for one narration call")
    narration_model: Optional[str] = Field(default=None, description="Model label sent in the narration request payload")

    @model_validator(mode="after")
    def check_history_bounds(self) -> "Settings":
        if self.history_capacity < self.min_history_for_assessment:
            raise ValueError(
                f"history_capacity ({self.history_capacity}) must be at least "
                f"min_history_for_assessment ({self.min_history_for_assessment})"
            )
        return self


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
