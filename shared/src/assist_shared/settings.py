from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )

    # Cameras / streams
    camera_ids: str = Field(default="cam-01")
    ingest_fps: int = Field(default=15, gt=0, description="Nominal frame rate of the detection stream")

    # Detector
    yolo_model: str = Field(default="yolo11n.pt")
    yolo_confidence: float = Field(default=0.5)
    yolo_iou: float = Field(default=0.7)
    detector_device: str = Field(default="cpu")

    # Tracker
    track_iou_threshold: float = Field(default=0.3)
    track_distance_threshold_px: float = Field(default=50.0)
    track_cleanup_delay_ms: float = Field(default=1500.0)
    track_history_size: int = Field(default=30)
    track_max_prediction_frames: int = Field(default=3)
    min_speed_threshold: float = Field(default=5.0, description="px/s below which a track is stationary")
    proximity_profile: str = Field(
        default="tracking",
        description="'tracking' (0.15/0.08) or 'display' (0.2/0.1) area-ratio thresholds",
    )

    # Alert gate
    announce_cooldown_ms: float = Field(default=3000.0)
    alert_policy_path: str = Field(
        default="",
        description="Optional YAML alert policy; built-in defaults are used when empty",
    )

    # Logging
    log_format: str = Field(default="console")
    log_level: str = Field(default="INFO")

    @property
    def camera_id_list(self) -> list[str]:
        return [c.strip() for c in self.camera_ids.split(",") if c.strip()]

    @property
    def frame_interval_ms(self) -> float:
        return 1000.0 / self.ingest_fps


# Module-level singleton; import and use directly
settings = Settings()
