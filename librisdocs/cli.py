"""
cli.py — Punto de entrada de librisdocs.

Comandos disponibles:
    python -m librisdocs run                     → Genera y publica (Action)
    python -m librisdocs run --dry-run           → Genera y escribe local
    python -m librisdocs run --output docs/x.html --branch gh-pages --orphan
    python -m librisdocs config --show           → Muestra configuración
    python -m librisdocs config --validate       → Valida configuración

Dentro del runner los inputs llegan como INPUT_*; las opciones del
CLI los reemplazan para poder correr el mismo flujo localmente.

Uso desde código (testing):
    from click.testing import CliRunner
    from librisdocs.cli import main
    CliRunner().invoke(main, ["config", "--validate"])
"""

from __future__ import annotations

import sys

import click
from rich.panel import Panel
from rich.table import Table

from librisdocs import __version__
from librisdocs.action import DocsAction
from librisdocs.config import config_problems, load_config
from librisdocs.errors import ConfigurationError
from librisdocs.utils.logger import console, get_logger

logger = get_logger("librisdocs.cli")


@click.group()
@click.version_option(version=__version__, prog_name="librisdocs")
def main():
    """Genera documentación con Libris y la publica en un branch de GitHub."""
    pass


@main.command()
@click.option("--config", "config_path", default=None,
              help="Config de Libris, relativa a GITHUB_WORKSPACE (input 'config').")
@click.option("--output", default=None,
              help="Ruta del HTML dentro del repo (input 'output').")
@click.option("--branch", default=None,
              help="Branch destino (input 'branch'; default: branch actual).")
@click.option("--orphan/--no-orphan", default=None,
              help="Crear el branch sin historia si no existe (input 'orphan').")
@click.option("--dry-run", is_flag=True, default=False,
              help="Genera y escribe el HTML localmente, NO publica.")
def run(
    config_path: str | None,
    output: str | None,
    branch: str | None,
    orphan: bool | None,
    dry_run: bool,
):
    """Genera la documentación y la publica."""
    overrides = {
        "config": config_path,
        "output": output,
        "branch": branch,
        "orphan": orphan,
    }
    sys.exit(DocsAction.start(overrides=overrides, dry_run=dry_run))


@main.command()
@click.option("--show", is_flag=True, help="Muestra la configuración resuelta")
@click.option("--validate", is_flag=True, help="Valida la configuración")
def config(show: bool, validate: bool):
    """Muestra o valida la configuración."""
    try:
        cfg = load_config()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    if show:
        tabla = Table(title="librisdocs")
        tabla.add_column("Parámetro", style="cyan")
        tabla.add_column("Valor", style="green")

        tabla.add_row("Repositorio", f"{cfg.owner}/{cfg.repo}" if cfg.owner else "(no configurado)")
        tabla.add_row("Workspace", cfg.workspace)
        tabla.add_row("Config Libris", cfg.inputs.abs_config_path)
        tabla.add_row("Output", cfg.inputs.output_path)
        tabla.add_row("Branch", cfg.inputs.branch or "(desconocido)")
        tabla.add_row("Orphan", "sí" if cfg.inputs.orphan else "no")
        tabla.add_row("Branch de referencia", cfg.github.reference_branch)
        tabla.add_row("GitHub API", cfg.github.api_url)
        tabla.add_row("Libris API", cfg.libris.api_url)
        tabla.add_row("GITHUB_TOKEN", "configurado" if cfg.github_token else "falta")
        tabla.add_row("LIBRIS_API_KEY", "configurada" if cfg.libris_api_key else "falta")

        console.print(tabla)

    if validate:
        problemas = config_problems(cfg)
        if problemas:
            console.print(Panel(
                "\n".join(f"- {p}" for p in problemas),
                title="Problemas encontrados",
                border_style="red",
            ))
            sys.exit(1)
        logger.success("Configuración válida")


if __name__ == "__main__":
    main()
