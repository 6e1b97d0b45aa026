"""
Configuration for the room ingestion pipeline.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class IngestionConfig:
    """
    Locations of the raw room export and the processed room table.
    """

    raw_data_dir: Path = Path("seamless/data/raw")
    raw_filename: str = "restaurant_rooms.csv"
    processed_data_dir: Path = Path("seamless/data/processed")
    processed_filename: str = "rooms.csv"

    @property
    def raw_path(self) -> Path:
        return self.raw_data_dir / self.raw_filename

    @property
    def processed_path(self) -> Path:
        return self.processed_data_dir / self.processed_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
