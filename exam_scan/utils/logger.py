import logging
import os
import sys
from pathlib import Path
from datetime import datetime

def setup_logger(name: str = "EXAM_SCAN", log_dir: str = "logs") -> logging.Logger:
    """
    Set up the shared logger for the whole package.

    How it works:
    1. File output: DEBUG level (every detail, for developers chasing a bad scan).
    2. Console output: INFO level (short progress messages).

    The log directory defaults to ``logs/`` next to the package and can be
    moved with the ``EXAM_SCAN_LOG_DIR`` environment variable.
    """
    # 1. Prepare the log directory
    env_dir = os.environ.get("EXAM_SCAN_LOG_DIR")
    if env_dir:
        log_path = Path(env_dir)
    else:
        # Project root = folder that contains the exam_scan package
        project_root = Path(__file__).resolve().parent.parent.parent
        log_path = project_root / log_dir
    log_path.mkdir(parents=True, exist_ok=True)

    # 2. One log file per day (e.g. session_2024-03-18.log)
    log_filename = f"session_{datetime.now().strftime('%Y-%m-%d')}.log"
    file_path = log_path / log_filename

    # 3. Create the logger
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers when called more than once
    if logger.hasHandlers():
        return logger

    # 4. Format: [YYYY-MM-DD HH:MM:SS] - [LEVEL] - message
    formatter = logging.Formatter('%(asctime)s - [%(levelname)s] - %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

    # --- HANDLER 1: file ---
    file_handler = logging.FileHandler(file_path, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # --- HANDLER 2: console ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger

# Singleton logger, imported by every other module
app_logger = setup_logger()
