# hrm_core/cli/registration_cli.py
import typer
from typing import Annotated, Optional

from .utils_cli import make_api_request
from ..tenants.models import Plan

app = typer.Typer(
    name="registration",
    help="Review pending organization registrations (superadmin token required).",
    no_args_is_help=True
)


@app.command("list")
def list_pending():
    """List registrations waiting for approval."""
    make_api_request("GET", "/tenants/pending")


@app.command("approve")
def approve(
    account_id: Annotated[str, typer.Argument(help="Account ID of the pending registration.")],
    plan: Annotated[Plan, typer.Option(help="Plan for the new tenant.")] = Plan.BASIC,
):
    """Approve a registration, creating its tenant."""
    make_api_request("POST", "/tenants/approve", json_payload={"account_id": account_id, "plan": plan.value})


@app.command("reject")
def reject(
    account_id: Annotated[str, typer.Argument(help="Account ID of the pending registration.")],
    reason: Annotated[Optional[str], typer.Option(help="Reason, recorded in the server log.")] = None,
):
    """Reject a registration and delete the pending account."""
    make_api_request("POST", "/tenants/reject", json_payload={"account_id": account_id, "reason": reason})


if __name__ == "__main__":
    app()
