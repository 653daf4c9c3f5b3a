"""
Utils package: helpers shared by the whole project.
Includes: logging, JSON file loading, and small OMR rules.
"""

from .logger import app_logger
from .file_io import FileHandler
from .helpers import OMRUtils

__all__ = ['app_logger', 'FileHandler', 'OMRUtils']
