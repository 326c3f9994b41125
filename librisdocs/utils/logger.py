"""
logger.py — Logging para librisdocs usando Rich + archivo opcional.

Dual output:
- Rich console: colores para el log del workflow (GitHub Actions
  soporta ANSI) y para uso local desde la terminal
- Archivo rotativo: solo si LIBRISDOCS_LOG_FILE apunta a una ruta,
  útil para guardar el log como artifact del workflow

Uso:
    from librisdocs.utils.logger import get_logger, console
    logger = get_logger("librisdocs.publishing")
    logger.info("Subiendo documentación...")
    logger.success("Documentación publicada")
    logger.error("Error al conectar con la API")
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

# No crear archivos de log dentro de pytest
_in_pytest = "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ

librisdocs_theme = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "bold yellow",
    "error": "bold red",
    "step": "bold magenta",
})

# Consola global — se usa en todo el proyecto
console = Console(theme=librisdocs_theme)

# ================================================================
# File logging setup
# ================================================================

_file_logger: logging.Logger | None = None


def _setup_file_logger() -> logging.Logger:
    """Configura el logger de archivo con rotacion (si está habilitado)."""
    global _file_logger
    if _file_logger is not None:
        return _file_logger

    log_file = os.environ.get("LIBRISDOCS_LOG_FILE", "")

    if _in_pytest or not log_file:
        _file_logger = logging.getLogger("librisdocs.null")
        _file_logger.addHandler(logging.NullHandler())
        return _file_logger

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    _file_logger = logging.getLogger("librisdocs.file")
    _file_logger.setLevel(logging.DEBUG)

    # Evitar handlers duplicados
    if not _file_logger.handlers:
        handler = RotatingFileHandler(
            log_path,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        _file_logger.addHandler(handler)

    return _file_logger


class ActionLogger:
    """
    Logger que escribe con Rich en consola y opcionalmente a archivo.

    Cada módulo crea su propio logger con un nombre para
    identificar de dónde viene cada mensaje.

    Args:
        name: Nombre del módulo (ej: "librisdocs.publisher")
    """

    def __init__(self, name: str):
        self._name = name
        self._file = _setup_file_logger()

    @property
    def name(self) -> str:
        return self._name

    def info(self, message: str) -> None:
        """Mensaje informativo (cyan)."""
        console.print(f"[info]{escape(message)}[/info]", highlight=False)
        self._file.info(f"[{self._name}] {message}")

    def success(self, message: str) -> None:
        """Mensaje de éxito (verde)."""
        console.print(f"[success]\\[OK] {escape(message)}[/success]", highlight=False)
        self._file.info(f"[{self._name}] OK: {message}")

    def warning(self, message: str) -> None:
        """Mensaje de advertencia (amarillo)."""
        console.print(f"[warning]\\[!] {escape(message)}[/warning]", highlight=False)
        self._file.warning(f"[{self._name}] {message}")

    def error(self, message: str) -> None:
        """Mensaje de error (rojo)."""
        console.print(f"[error]\\[X] {escape(message)}[/error]", highlight=False)
        self._file.error(f"[{self._name}] {message}")

    def step(self, number: int, total: int, message: str) -> None:
        """Mensaje de paso en un proceso."""
        console.print(f"[step]  \\[{number}/{total}] {escape(message)}[/step]", highlight=False)
        self._file.info(f"[{self._name}] [{number}/{total}] {message}")


def get_logger(name: str = "librisdocs") -> ActionLogger:
    """
    Obtiene un logger para el módulo especificado.

    Ejemplo:
        logger = get_logger("librisdocs.generation")
        logger.info("Generando documentación...")
    """
    return ActionLogger(name)
