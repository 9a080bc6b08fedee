from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Random source for storm evolution. Unset = fresh entropy each start.
    random_seed: int | None = Field(default=None)

    # Storm at process start
    initial_storm_intensity: float = Field(default=0.5, ge=0.0, le=1.0)
    storm_movement_speed_mph: float = Field(default=15.0)
    storm_direction_deg: float = Field(default=180.0)
    storm_eye_radius_mi: float = Field(default=10.0)

    # CORS
    cors_origins: str = Field(default="http://localhost:5173,http://localhost:3000")

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
