# hrm_core/cli/main_cli.py
import typer
from typing import Annotated

from . import admin_cli
from .utils_cli import make_api_request

# Main CLI application with help enabled when no arguments are provided
app = typer.Typer(
    name="hrm",
    help="HRM Core Command Line Interface.",
    no_args_is_help=True
)

# Register admin commands under 'admin' subcommand
app.add_typer(admin_cli.app, name="admin")


@app.command("login")
def login(
    email: Annotated[str, typer.Option(prompt="Email")],
    password: Annotated[str, typer.Option(prompt="Password", hide_input=True)],
):
    """Log in and print a session token for HRM_CLI_TOKEN."""
    data = make_api_request(
        "POST",
        "/auth/login",
        json_payload={"email": email, "password": password},
        authenticated=False,
        quiet=True,
    )
    typer.secho(
        f"CLI: Logged in as {data['account']['email']} ({data['account']['role']}), "
        f"token expires at {data['expires_at']}.",
        fg=typer.colors.GREEN
    )
    typer.echo(f"export HRM_CLI_TOKEN={data['token']}")


@app.callback()
def main_callback():
    """
    HRM Core main CLI application.
    Use 'hrm admin --help' for admin commands.
    """
    pass


def cli_entry_point():
    """Entry point function for console script registration in pyproject.toml"""
    app()


if __name__ == "__main__":
    cli_entry_point()
