# -*- coding: utf-8 -*-
"""
通用工具
"""

from .platform import (
    ALL_PLATFORMS,
    current_platform,
    library_filename,
    matches_platform,
)

__all__ = [
    "ALL_PLATFORMS",
    "current_platform",
    "library_filename",
    "matches_platform",
]
