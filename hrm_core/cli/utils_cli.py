# hrm_core/cli/utils_cli.py
import requests
import typer
import json
from typing import Optional, Dict, Any, Union, List

from . import config


def _error_text(response: requests.Response) -> str:
    """Render an API error body as 'Kind: message' when it follows the error shape."""
    try:
        err_data = response.json()
    except json.JSONDecodeError:
        return response.text
    if isinstance(err_data, dict) and "error" in err_data:
        return f"{err_data['error']}: {err_data.get('message', '')}"
    return json.dumps(err_data)


def make_api_request(
    method: str,
    endpoint: str,
    json_payload: Optional[Dict[str, Any]] = None,
    params_payload: Optional[Dict[str, Any]] = None,
    expected_status: Union[int, List[int]] = 200,
    authenticated: bool = True,
    quiet: bool = False,
) -> Any:
    """
    Makes an HTTP request against the HRM Core API and prints the result.

    Authenticates with HRM_CLI_TOKEN as a Bearer token when ``authenticated``
    is set. Exits with code 1 on connection errors and unexpected statuses.
    """
    full_url = f"{config.HRM_CLI_API_BASE_URL}/api{endpoint}"
    headers: Dict[str, str] = {}

    if authenticated:
        if config.HRM_CLI_TOKEN:
            headers["Authorization"] = f"Bearer {config.HRM_CLI_TOKEN}"
        else:
            typer.secho(
                "CLI: Warning - HRM_CLI_TOKEN not set. Run 'hrm login' and export the token.",
                fg=typer.colors.YELLOW
            )

    if not quiet:
        typer.echo(f"CLI: {method.upper()} {full_url}")
        if params_payload:
            typer.echo(f"CLI: Query Params: {params_payload}")

    try:
        response = requests.request(
            method,
            full_url,
            json=json_payload,
            params=params_payload,
            headers=headers,
            timeout=config.HRM_CLI_TIMEOUT_SECONDS,
        )
    except requests.exceptions.ConnectionError as e:
        typer.secho(
            f"CLI: Connection Error - Could not connect to API at {full_url}. Is the server running? Error: {e}",
            fg=typer.colors.RED
        )
        raise typer.Exit(code=1)
    except requests.exceptions.RequestException as e:
        typer.secho(f"CLI: Request Error - {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    expected_statuses = [expected_status] if isinstance(expected_status, int) else expected_status
    if response.status_code not in expected_statuses:
        typer.secho(
            f"CLI: API Error ({response.status_code}) - {_error_text(response)}",
            fg=typer.colors.RED
        )
        raise typer.Exit(code=1)

    if not response.content:
        typer.secho(f"CLI: Success (Status {response.status_code}, No Content).", fg=typer.colors.GREEN)
        return None

    try:
        data = response.json()
    except json.JSONDecodeError:
        typer.secho(f"CLI: Error - Could not decode JSON response. Raw text: {response.text}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if not quiet:
        typer.echo(json.dumps(data, indent=2))
    return data
