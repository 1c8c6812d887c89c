from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    sessions_root: Path = Path("sessions")
    default_template_path: Path = Path("excelBase/template.xlsx")
    project_header_cell: str = "H1"
    column_map_path: Path | None = None

    analysis_provider: str = "openai"
    analysis_prompt_path: Path | None = None
    analysis_poll_interval_seconds: float = 1.0
    analysis_timeout_seconds: float = 300.0
    max_images_per_item: int = 10
    max_concurrent_documents: int = 10

    openai_api_key: str = ""
    openai_assistant_id: str = ""
    openai_base_url: str | None = None
    openai_timeout_seconds: int = 30

    prompt_cost_per_million: float = 2.5
    completion_cost_per_million: float = 10.0

    pdf_engine: str = "pymupdf"

    embedded_image_size: int = 100
    embedded_row_height: float = 100
    embedded_column_width: float = 30
