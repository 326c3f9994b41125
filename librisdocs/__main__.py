"""
__main__.py — Permite ejecutar librisdocs como módulo.

    python -m librisdocs run

Es lo que ejecuta action.yml dentro del runner.
"""

from librisdocs.cli import main

if __name__ == "__main__":
    main()
