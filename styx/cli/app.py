"""
Aplicación CLI de styx.

Solo compone comandos y formatea salida; la lógica vive en core, providers
y bootstrap. Los errores del core se traducen aquí a códigos de salida.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from styx import __version__
from styx.bootstrap.agent import DEFAULT_API_URL, DEFAULT_DELAY, DEFAULT_MAX_ATTEMPTS, AgentState, CredentialAgent
from styx.bootstrap.task import handshake_command, launch_handshake, spawn_detached_handshake
from styx.cloudinit import render_cloud_init
from styx.converge import Provisioner
from styx.core.doctor import missing_tools, run_doctor
from styx.core.errors import StyxError
from styx.core.logs import agent_logger, setup_logging
from styx.core.permissions import require_root
from styx.core.project.detector import detect_drift
from styx.core.runtime.fingerprints import FingerprintStore
from styx.core.runtime.resolver import (
    HANDSHAKE_LOG,
    SETUP_COMPLETE_MARKER,
    credentials_marker,
    env_file_path,
    state_root,
)
from styx.core.runtime.state import Action
from styx.providers import build_providers
from styx.store import EnvStore

app = typer.Typer(
    name="styx",
    help="styx - Provisión convergente de un bastión WireGuard + Nginx Proxy Manager",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger("styx")

ENV_FILE_OPTION = typer.Option(None, "--env-file", "-e", help="Archivo de entorno (por defecto /root/styx_env.sh)")


def make_provisioner(env_file: Optional[Path]) -> Provisioner:
    return Provisioner(env_file_path(env_file))


def _mark_credentials_replaced() -> None:
    marker = credentials_marker()
    try:
        marker.parent.mkdir(parents=True, exist_ok=True)
        marker.touch()
    except OSError as e:
        logger.warning("No se pudo crear %s: %s", marker, e)


def _action_style(action: Action) -> str:
    return {
        Action.SKIP: "[dim]skip[/dim]",
        Action.CREATE: "[green]create[/green]",
        Action.UPDATE: "[yellow]update[/yellow]",
    }[action]


def _plan_table(plan, title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", style="cyan", width=4)
    table.add_column("Recurso", style="cyan")
    table.add_column("Estado", style="green")
    table.add_column("Acción")
    table.add_column("Detalle", style="dim")
    for idx, resource in enumerate(plan.resources, 1):
        table.add_row(
            str(idx),
            resource.name,
            resource.current_state.value,
            _action_style(resource.target_action),
            resource.detail,
        )
    return table


@app.command()
def setup(
    env_file: Optional[Path] = ENV_FILE_OPTION,
    wait: bool = typer.Option(False, "--wait/--no-wait", help="Esperar al agente de credenciales en lugar de dejarlo en segundo plano"),
    attempts: int = typer.Option(DEFAULT_MAX_ATTEMPTS, "--attempts", help="Intentos máximos de sondeo de la API"),
    delay: float = typer.Option(DEFAULT_DELAY, "--delay", help="Segundos entre sondeos"),
    agent_log: Path = typer.Option(HANDSHAKE_LOG, "--agent-log", help="Log propio del agente de credenciales"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Modo verbose"),
):
    """
    Converge el host al estado deseado (WireGuard, forwarding, ufw, podman, systemd)

    Solo aplica lo que cambió; una segunda ejecución sin cambios no toca nada.

    Ejemplo: sudo styx setup
    """
    setup_logging(verbose)
    provisioner = make_provisioner(env_file)
    credentials_done = credentials_marker().exists()

    try:
        result = provisioner.run()
    except StyxError as e:
        logger.error("Error: %s", e)
        raise typer.Exit(code=1)

    console.print(_plan_table(result.plan, "Convergencia"))

    if not result.success:
        failed = result.report.failed
        logger.error("Provisión incompleta: falló el recurso '%s' (%s). Corrige y vuelve a ejecutar.", failed.resource, failed.reason)
        raise typer.Exit(code=1)

    try:
        SETUP_COMPLETE_MARKER.touch()
    except OSError as e:
        logger.warning("No se pudo crear %s: %s", SETUP_COMPLETE_MARKER, e)

    if result.report.started_stack and credentials_done:
        # Las credenciales de fábrica ya no existen; el login del agente fallaría
        logger.info("Stack reiniciado; las credenciales ya se reemplazaron antes (usa 'styx credentials' para repetirlo)")
    elif result.report.started_stack and wait:
        agent = CredentialAgent(
            email=result.config.npm_admin_email,
            password=result.config.npm_admin_password,
            max_attempts=attempts,
            delay=delay,
            logger=agent_logger(agent_log),
        )
        logger.info("Esperando a que el agente de credenciales termine (log: %s)...", agent_log)
        if launch_handshake(agent).join() == AgentState.SUCCEEDED:
            _mark_credentials_replaced()
    elif result.report.started_stack:
        spawn_detached_handshake(handshake_command(provisioner.store.path, attempts, delay, agent_log))
        logger.info("Revisa %s para ver el progreso del agente de credenciales", agent_log)

    changed = result.report.changed
    logger.info("Recursos modificados: %s", ", ".join(changed) if changed else "ninguno")
    logger.info("Nginx Proxy Manager disponible en: http://%s:81", result.config.domain_name)
    logger.info("Styx setup completado con éxito")


@app.command()
def plan(
    env_file: Optional[Path] = ENV_FILE_OPTION,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Modo verbose"),
):
    """
    Muestra qué recursos se crearían, actualizarían u omitirían (sin aplicar nada)
    """
    setup_logging(verbose)
    provisioner = make_provisioner(env_file)
    try:
        config = provisioner.preflight()
        if not config.wg_private_key:
            # No se persiste nada en modo plan
            config = config.with_private_key("<se generará>")
        result = provisioner.plan(config)
    except StyxError as e:
        logger.error("Error: %s", e)
        raise typer.Exit(code=1)

    console.print(_plan_table(result, "Plan"))
    console.print(f"\n[bold]{result.summary}[/bold]")


@app.command()
def status(
    env_file: Optional[Path] = ENV_FILE_OPTION,
):
    """
    Compara los artefactos del host con los fingerprints del último apply (drift)
    """
    setup_logging()
    try:
        require_root()
        config = EnvStore(env_file_path(env_file)).load_config()
        diffs = detect_drift(build_providers(config), FingerprintStore(state_root()))
    except StyxError as e:
        logger.error("Error: %s", e)
        raise typer.Exit(code=1)

    if not diffs:
        console.print("[green]✅ No se detectó drift. El host coincide con el último apply.[/green]")
        return

    table = Table(title="Drift detectado", show_header=True, header_style="bold")
    table.add_column("Recurso", style="cyan")
    table.add_column("Campo", style="cyan")
    table.add_column("Registrado", style="green")
    table.add_column("Real", style="yellow")
    table.add_column("Severidad")
    for diff in diffs:
        severity = {
            "error": "[red]ERROR[/red]",
            "warning": "[yellow]WARNING[/yellow]",
            "info": "[blue]INFO[/blue]",
        }.get(diff.severity, diff.severity)
        table.add_row(diff.resource_id, diff.field, str(diff.desired), str(diff.actual), severity)
    console.print(table)


@app.command()
def credentials(
    env_file: Optional[Path] = ENV_FILE_OPTION,
    attempts: int = typer.Option(DEFAULT_MAX_ATTEMPTS, "--attempts", help="Intentos máximos de sondeo de la API"),
    delay: float = typer.Option(DEFAULT_DELAY, "--delay", help="Segundos entre sondeos"),
    api_url: str = typer.Option(DEFAULT_API_URL, "--api-url", help="URL de la API de administración"),
    agent_log: Optional[Path] = typer.Option(None, "--agent-log", help="Archivo de log del agente (por defecto stderr)"),
):
    """
    Reemplaza en primer plano las credenciales por defecto de Nginx Proxy Manager

    Es también el proceso que `styx setup` deja en segundo plano.
    """
    setup_logging()
    try:
        config = EnvStore(env_file_path(env_file)).load_config()
    except StyxError as e:
        logger.error("Error: %s", e)
        raise typer.Exit(code=1)

    agent = CredentialAgent(
        email=config.npm_admin_email,
        password=config.npm_admin_password,
        api_url=api_url,
        max_attempts=attempts,
        delay=delay,
        logger=agent_logger(agent_log),
    )
    if agent.run() != AgentState.SUCCEEDED:
        raise typer.Exit(code=1)
    _mark_credentials_replaced()


@app.command()
def doctor():
    """Verifica herramientas requeridas y permisos del host"""
    run_doctor(console)
    if missing_tools():
        raise typer.Exit(code=1)


@app.command("init-env")
def init_env(
    env_file: Optional[Path] = ENV_FILE_OPTION,
    force: bool = typer.Option(False, "--force", help="Sobrescribir si ya existe"),
):
    """Crea el archivo de entorno desde la plantilla (permisos 0600)"""
    store = EnvStore(env_file_path(env_file))
    if store.write_template(overwrite=force):
        console.print(f"[green]✔ Plantilla creada: {store.path}[/green]")
        console.print("[dim]Completa las variables requeridas y ejecuta 'styx setup'[/dim]")
    else:
        console.print(f"[yellow]⚠ {store.path} ya existe (usa --force para sobrescribir)[/yellow]")


@app.command("cloud-init")
def cloud_init(
    ssh_key: str = typer.Option(..., "--ssh-key", help="Clave SSH pública del usuario administrador"),
    package: str = typer.Option(..., "--package", help="Origen pip de styx: URL git (git+https://...) o ruta a wheel"),
    hostname: str = typer.Option("styx", "--hostname"),
    timezone: str = typer.Option("America/Chicago", "--timezone"),
    port: List[str] = typer.Option([], "--port", "-p", help="Puerto extra a abrir en ufw (ej: 25565/tcp)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Archivo de salida (por defecto stdout)"),
):
    """Genera el seed cloud-init del bastión"""
    try:
        seed = render_cloud_init(ssh_key, package, hostname=hostname, timezone=timezone, extra_ports=port)
    except ValueError as e:
        console.print(f"[red]✘ {e}[/red]")
        raise typer.Exit(code=1)

    if output is None:
        typer.echo(seed, nl=False)
        return
    output.write_text(seed)
    console.print(f"[green]✔ Seed cloud-init escrito en {output}[/green]")


@app.command()
def version():
    """Muestra la versión de styx"""
    console.print(Panel.fit(
        "[bold cyan]styx[/bold cyan]\n"
        "[dim]Bastión WireGuard + Nginx Proxy Manager[/dim]\n\n"
        f"[bold]Versión:[/bold] {__version__}\n"
        f"[bold]Estado:[/bold] {state_root()}",
        border_style="cyan"
    ))


def main():
    app()
