"""
librisdocs — Genera documentación con Libris y la publica en GitHub.

Este paquete contiene todo el código del Action:
- generation/  → Cliente de la API de Libris
- publishing/  → API de GitHub y Publisher (branch + archivo)
- utils/       → Logger, validadores, comandos del runner
- action.py    → El paso completo (generar → publicar → reportar)
- cli.py       → Comandos de terminal

Uso:
    python -m librisdocs run
    python -m librisdocs run --dry-run
    python -m librisdocs config --show
"""

__version__ = "1.0.0"
