from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


REPO_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    api_host: str = Field(default="0.0.0.0", alias="EVIDEX_API_HOST")
    api_port: int = Field(default=8791, alias="EVIDEX_API_PORT")

    evaluation_base_url: str = Field(default="http://localhost:8000", alias="EVIDEX_EVALUATION_BASE_URL")
    evaluation_path: str = Field(default="/evaluate-erisa", alias="EVIDEX_EVALUATION_PATH")
    evaluation_mode: Literal["api", "local"] = Field(default="api", alias="EVIDEX_EVALUATION_MODE")
    evaluation_timeout_seconds: float = Field(default=300.0, gt=0.0, alias="EVIDEX_EVALUATION_TIMEOUT_SECONDS")
    local_evaluation_delay_seconds: float = Field(default=1.0, ge=0.0, alias="EVIDEX_LOCAL_EVALUATION_DELAY_SECONDS")

    state_dir: str = Field(default=".evidex_state", alias="EVIDEX_STATE_DIR")

    container_width: int = Field(default=832, ge=64, alias="EVIDEX_CONTAINER_WIDTH")
    default_zoom: float = Field(default=1.2, gt=0.0, alias="EVIDEX_DEFAULT_ZOOM")
    min_zoom: float = Field(default=0.5, gt=0.0, alias="EVIDEX_MIN_ZOOM")
    zoom_step: float = Field(default=0.2, gt=0.0, alias="EVIDEX_ZOOM_STEP")
    page_image_dpi: int = Field(default=144, ge=36, alias="EVIDEX_PAGE_IMAGE_DPI")
    keep_offset_across_documents: bool = Field(default=False, alias="EVIDEX_KEEP_OFFSET_ACROSS_DOCUMENTS")

    log_level: str = Field(default="INFO", alias="EVIDEX_LOG_LEVEL")

    def resolve_path(self, path_value: str) -> Path:
        candidate = Path(path_value).expanduser()
        if candidate.is_absolute():
            return candidate
        return REPO_ROOT / candidate

    @property
    def state_path(self) -> Path:
        return self.resolve_path(self.state_dir)

    @property
    def evaluation_url(self) -> str:
        return f"{self.evaluation_base_url.rstrip('/')}/{self.evaluation_path.lstrip('/')}"

    def ensure_runtime_dirs(self) -> None:
        self.state_path.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.ensure_runtime_dirs()
    return settings
