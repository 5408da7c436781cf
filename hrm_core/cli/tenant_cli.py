# hrm_core/cli/tenant_cli.py
import typer
from typing import Annotated, Optional

from .utils_cli import make_api_request
from ..tenants.models import Plan, TenantStatus

app = typer.Typer(
    name="tenant",
    help="Manage tenants (superadmin token required).",
    no_args_is_help=True
)


@app.command("create")
def create_tenant(
    name: Annotated[str, typer.Option(prompt="Tenant name", help="Display name for the tenant.")],
    company: Annotated[str, typer.Option(prompt="Company", help="Legal company name.")],
    email: Annotated[str, typer.Option(prompt="Tenant contact email")],
    admin_name: Annotated[str, typer.Option(prompt="Administrator name")],
    admin_email: Annotated[str, typer.Option(prompt="Administrator email")],
    admin_password: Annotated[
        str,
        typer.Option(prompt="Administrator password", hide_input=True, confirmation_prompt=True)
    ],
    plan: Annotated[Plan, typer.Option(help="Subscription plan.")] = Plan.BASIC,
    phone: Annotated[Optional[str], typer.Option(help="Contact phone.")] = None,
    industry: Annotated[Optional[str], typer.Option(help="Industry.")] = None,
):
    """Create a tenant together with its administrator account."""
    payload = {
        "name": name,
        "company": company,
        "email": email,
        "plan": plan.value,
        "phone": phone,
        "industry": industry,
        "admin_name": admin_name,
        "admin_email": admin_email,
        "admin_password": admin_password,
    }
    make_api_request("POST", "/tenants", json_payload=payload, expected_status=201)


@app.command("get")
def get_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to retrieve.")]
):
    """Get details for a specific tenant."""
    make_api_request("GET", f"/tenants/{tenant_id}")


@app.command("list")
def list_tenants(
    skip: Annotated[int, typer.Option("--skip", help="Number of tenants to skip.", min=0)] = 0,
    limit: Annotated[int, typer.Option("--limit", help="Maximum number of tenants to return.", min=1, max=500)] = 100
):
    """List tenants."""
    make_api_request("GET", "/tenants", params_payload={"skip": skip, "limit": limit})


@app.command("stats")
def tenant_stats():
    """Show tenant counts by status and pending registrations."""
    make_api_request("GET", "/tenants/stats")


@app.command("usage")
def tenant_usage(
    skip: Annotated[int, typer.Option("--skip", help="Number of tenants to skip.", min=0)] = 0,
    limit: Annotated[int, typer.Option("--limit", help="Maximum number of tenants to report.", min=1, max=500)] = 100
):
    """Show active and inactive account counts per tenant."""
    make_api_request("GET", "/tenants/usage", params_payload={"skip": skip, "limit": limit})


@app.command("growth")
def tenant_growth(
    months: Annotated[int, typer.Option("--months", help="Number of calendar months to report.", min=1, max=24)] = 6
):
    """Show tenants created per month."""
    make_api_request("GET", "/tenants/growth", params_payload={"months": months})


@app.command("update")
def update_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to update.")],
    name: Annotated[Optional[str], typer.Option("--name")] = None,
    company: Annotated[Optional[str], typer.Option("--company")] = None,
    email: Annotated[Optional[str], typer.Option("--email")] = None,
    phone: Annotated[Optional[str], typer.Option("--phone")] = None,
    plan: Annotated[Optional[Plan], typer.Option("--plan")] = None,
    status: Annotated[
        Optional[TenantStatus],
        typer.Option("--status", help="Plain field write; use activate/suspend to cascade to accounts.")
    ] = None,
):
    """Update an existing tenant. Only provided fields will be updated."""
    payload = {
        key: (value.value if hasattr(value, "value") else value)
        for key, value in {
            "name": name, "company": company, "email": email,
            "phone": phone, "plan": plan, "status": status,
        }.items()
        if value is not None
    }

    # Exit early if no update parameters were provided
    if not payload:
        typer.echo("No update parameters provided. Nothing to do.")
        raise typer.Exit()

    make_api_request("PUT", f"/tenants/{tenant_id}", json_payload=payload)


@app.command("activate")
def activate_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to activate.")]
):
    """Activate a tenant and approve all of its accounts."""
    make_api_request("PATCH", f"/tenants/{tenant_id}/activate")


@app.command("suspend")
def suspend_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to suspend.")]
):
    """Suspend a tenant and unapprove all of its accounts."""
    make_api_request("PATCH", f"/tenants/{tenant_id}/suspend")


@app.command("delete")
def delete_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to delete.")],
    yes: Annotated[bool, typer.Option("--yes", help="Skip the confirmation prompt.")] = False,
):
    """Delete a tenant with all of its accounts and employee profiles."""
    if not yes:
        typer.confirm(f"Delete tenant {tenant_id} and all of its accounts?", abort=True)
    make_api_request("DELETE", f"/tenants/{tenant_id}")


if __name__ == "__main__":
    app()
