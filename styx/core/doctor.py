"""
Módulo Doctor - Verificación de herramientas requeridas en el host
"""

from typing import Callable, Dict, List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from styx.core.errors import PreconditionError
from styx.core.permissions import is_root
from styx.core.tools import run_command, which


# Herramientas que invocan los providers
REQUIRED_TOOLS = [
    "wg",
    "wg-quick",
    "podman",
    "podman-compose",
    "systemctl",
    "sysctl",
    "ufw",
]


def check_tool(tool_name: str) -> Tuple[bool, Optional[str]]:
    """
    Verifica si una herramienta está instalada y disponible

    Returns:
        Tuple (is_available, version_info)
    """
    if which(tool_name) is None:
        return False, None

    version_info = None
    success, stdout, _ = run_command([tool_name, "--version"], timeout=5)
    if success and stdout:
        version_info = stdout.split("\n")[0][:50]
    return True, version_info


def missing_tools(
    required: Optional[List[str]] = None,
    lookup: Callable[[str], Optional[str]] = which,
) -> List[str]:
    """Herramientas requeridas que no están en PATH."""
    return [tool for tool in (required or REQUIRED_TOOLS) if lookup(tool) is None]


def require_tools(
    required: Optional[List[str]] = None,
    lookup: Callable[[str], Optional[str]] = which,
) -> None:
    """Lanza PreconditionError con todas las herramientas ausentes."""
    missing = missing_tools(required, lookup)
    if missing:
        raise PreconditionError(
            f"Faltan herramientas requeridas: {', '.join(missing)}", missing=missing
        )


def run_doctor(console: Console, required_tools: Optional[List[str]] = None) -> Dict[str, bool]:
    """
    Ejecuta verificación completa del host (doctor)

    Returns:
        Dict con resultados de verificación
    """
    if required_tools is None:
        required_tools = REQUIRED_TOOLS

    console.print(Panel.fit("[bold cyan]Doctor - Verificación del Host[/bold cyan]", border_style="cyan"))

    results = {}

    tool_table = Table(show_header=True, header_style="bold cyan")
    tool_table.add_column("Herramienta", style="cyan")
    tool_table.add_column("Estado", style="green")
    tool_table.add_column("Versión", style="dim")

    for tool in required_tools:
        available, version = check_tool(tool)
        status = "[green]✔ Disponible[/green]" if available else "[red]✘ No encontrado[/red]"
        tool_table.add_row(tool, status, version or "[dim]N/A[/dim]")
        results[f"tool_{tool}"] = available

    console.print(tool_table)

    results["perm_root"] = is_root()
    root_status = "[green]✔ root[/green]" if results["perm_root"] else "[yellow]⚠ sin root[/yellow]"
    console.print(f"\n[bold]Permisos:[/bold] {root_status}")

    missing = [tool for tool in required_tools if not results[f"tool_{tool}"]]
    if missing:
        console.print("\n[yellow]⚠️ Algunas herramientas faltan[/yellow]")
        console.print(f"[dim]Faltan: {', '.join(missing)}[/dim]")
    else:
        console.print("\n[bold green]✅ Todas las herramientas requeridas están disponibles[/bold green]")

    return results
