from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MiB = 1024 * 1024


class SliceSettings(BaseSettings):
    """Runtime knobs for a split, read from GZSLICE_* environment variables."""

    read_chunk_size: int = Field(MiB, ge=1)
    write_buffer_size: int = Field(MiB, ge=1)
    compress_level: int = Field(6, ge=0, le=9)
    queue_factor: int = Field(2, ge=1)
    show_progress: bool = False
    log_level: str = "INFO"
    metrics_port: Optional[int] = None

    model_config = SettingsConfigDict(
        env_prefix="GZSLICE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    def queue_capacity(self, shard_count: int) -> int:
        return self.queue_factor * shard_count


@lru_cache()
def get_settings() -> SliceSettings:
    return SliceSettings()
