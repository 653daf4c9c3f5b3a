import json
from pathlib import Path
from typing import Dict, Any, List
from .logger import app_logger

class FileHandler:
    """
    Static helper for reading the JSON inputs of the package
    (runtime configuration and evaluation definitions).
    Errors are logged here and re-raised to the caller.
    """

    @staticmethod
    def load_json(file_path: Path) -> Any:
        """
        Load a JSON document safely.

        Args:
            file_path (Path): Path of the file.

        Returns:
            The parsed JSON data.
        """
        if not isinstance(file_path, Path):
            file_path = Path(file_path)

        try:
            resolved_path = file_path.resolve()

            if not resolved_path.exists():
                app_logger.error(f"File not found: {resolved_path}")
                raise FileNotFoundError(f"File not found: {resolved_path}")

            with open(resolved_path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            app_logger.debug(f"Loaded JSON successfully: {resolved_path.name}")
            return data

        except json.JSONDecodeError as e:
            app_logger.critical(f"JSON Syntax Error in {file_path}: {e}")
            raise ValueError(f"JSON syntax error in {file_path.name}: {e}")
        except Exception as e:
            app_logger.error(f"Unexpected error loading {file_path}: {e}")
            raise

    @staticmethod
    def load_config(filename: Path = Path("config.json")) -> Dict[str, Any]:
        """Wrapper that loads the runtime configuration."""
        data = FileHandler.load_json(filename)
        if not isinstance(data, dict):
            raise ValueError(f"Config file {filename} must contain a JSON object.")
        return data

    @staticmethod
    def load_evaluation(file_path: Path) -> List[Dict[str, Any]]:
        """
        Load the question list of an evaluation.

        Accepts either a bare list of question objects or an object with a
        ``questions`` key. Each question is a dict with ``id``, ``options``
        (list of ``{text, is_correct}``) and optional ``order`` / ``points``.
        """
        data = FileHandler.load_json(file_path)
        if isinstance(data, dict):
            data = data.get('questions')
        if not isinstance(data, list):
            app_logger.error(f"Evaluation file {file_path} has no question list.")
            raise ValueError(f"Evaluation file {file_path} has no question list.")
        return data
