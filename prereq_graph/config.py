"""
Settings for the prerequisite pipeline, read from environment variables.
CLI flags take precedence over these values.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_LISTING_URL = "https://www.ubcfinder.com/data/course-data/subjects-prereqs/course-prereqs.json"
DEFAULT_MODEL = "qwen2.5:14b-instruct"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

@dataclass
class Settings:
    """Pipeline configuration."""

    data_dir: Path = Path("data")
    listing_url: str = DEFAULT_LISTING_URL
    ollama_model: str = DEFAULT_MODEL
    max_depth_passes: int = 10
    workers: int = 3

    @property
    def courses_dir(self) -> Path:
        return self.data_dir / "courses"

    @property
    def fetch_dir(self) -> Path:
        return self.data_dir / "fetch"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            data_dir=Path(os.environ.get("PREREQ_DATA_DIR", "data")),
            listing_url=os.environ.get("COURSE_LISTING_URL", DEFAULT_LISTING_URL),
            ollama_model=os.environ.get("OLLAMA_MODEL", DEFAULT_MODEL),
            max_depth_passes=int(os.environ.get("PREREQ_MAX_DEPTH_PASSES", "10")),
            workers=int(os.environ.get("PREREQ_WORKERS", "3")),
        )

def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
