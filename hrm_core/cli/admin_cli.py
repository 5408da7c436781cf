# hrm_core/cli/admin_cli.py
import asyncio
import typer
from typing import Annotated, Optional

from . import registration_cli
from . import tenant_cli
from ..errors import DuplicateEmailError

# Main admin CLI application with helpful configuration
app = typer.Typer(
    name="admin",
    help="HRM Core Administrative Commands.",
    no_args_is_help=True
)

# Register sub-command modules for administrative operations
app.add_typer(tenant_cli.app, name="tenant")
app.add_typer(registration_cli.app, name="registration")


async def _bootstrap(email: str, password: str, name: str):
    from ..accounts.sqlite_account_store import get_sqlite_account_store
    from ..auth.service import bootstrap_superadmin
    from ..storage.sqlite_base import close_sqlite_db_connection

    try:
        account_store = await get_sqlite_account_store()
        return await bootstrap_superadmin(account_store, email, password, name)
    finally:
        await close_sqlite_db_connection()


@app.command("bootstrap-superadmin")
def bootstrap_superadmin_command(
    email: Annotated[str, typer.Option(prompt="Superadmin email")],
    password: Annotated[str, typer.Option(prompt="Superadmin password", hide_input=True, confirmation_prompt=True)],
    name: Annotated[Optional[str], typer.Option(help="Display name.")] = None,
):
    """
    Create the first superadmin directly in the configured SQLite database.

    Runs locally, without the API server.
    """
    from ..settings import settings

    try:
        account = asyncio.run(_bootstrap(email, password, name or settings.bootstrap_superadmin_name))
    except DuplicateEmailError:
        typer.secho("CLI: Error - That email belongs to a non-superadmin account.", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.secho(f"CLI: Superadmin ready: {account.account_id} ({account.email})", fg=typer.colors.GREEN)


@app.callback()
def admin_callback():
    """
    HRM Core Admin CLI entry point callback.

    Remote commands authenticate with HRM_CLI_TOKEN against HRM_CLI_API_BASE_URL.
    """
    pass


if __name__ == "__main__":
    app()
