"""Application configuration."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    repo_path: Path = Path("repo")
    content_dir: str = "content"
    cms_config_path: str = "static/admin/config.yml"
    cache_concurrency: int = Field(default=20, ge=1)
    file_read_head_limit: int = Field(default=4096, ge=1)
    diff_renderer: Literal["difflib", "git"] = "difflib"
    debug: bool = False
    app_title: str = "Pressroom"

    model_config = SettingsConfigDict(
        env_prefix="PRESSROOM_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def content_root(self) -> Path:
        """Directory holding the site's content files."""
        return self.repo_path / self.content_dir

    @property
    def cms_config_file(self) -> Path:
        """Collection schema file inside the working tree."""
        return self.repo_path / self.cms_config_path


settings = Settings()
