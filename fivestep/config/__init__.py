"""Configuration module."""

from fivestep.config.constants import CURRICULUM, CurriculumConstants
from fivestep.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "CurriculumConstants", "CURRICULUM"]
