"""FastAPI routers acting as controllers in the MVC architecture."""

from . import evaluation, scenario, transcription

__all__ = ["evaluation", "scenario", "transcription"]
