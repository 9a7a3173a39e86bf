"""
Models package - Pydantic data models for Comic Cover

Re-exports all models for cleaner imports:
    from comic_cover.models import GenerationJob, JobStatus, DialogueLine
"""

from comic_cover.models.models import *
