"""mediasort - sort photos, videos and audio recordings into date and device folders."""

__version__ = "0.1.0"

from mediasort.config import Config, load_config
from mediasort.pipeline import run_pipeline
from mediasort.planner import Planner
from mediasort.scanner import Scanner

__all__ = ["Config", "Planner", "Scanner", "load_config", "run_pipeline"]
