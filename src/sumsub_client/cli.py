"""
Command-line interface for the Sumsub client.

Usage:
    sumsub-client sign --method POST --uri /resources/applicants --body '{"a":1}'
    sumsub-client verify-webhook payload.json --alg HMAC_SHA256_HEX --digest <hex>
    cat payload.json | sumsub-client verify-webhook - --digest <hex>
    sumsub-client health
    sumsub-client review-status <applicant-id>
"""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import asdict
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import click
import httpx
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from sumsub_client.client import Client
from sumsub_client.config import DEFAULT_HOST, ClientConfig
from sumsub_client.errors import APIError, SumsubError
from sumsub_client.models import ReviewStatus
from sumsub_client.signer import HMACSigner
from sumsub_client.webhook import DigestAlgorithm, WebhookVerificationError, verify_webhook_digest


console = Console()


def read_payload(source: str) -> bytes:
    """Read a raw payload from a file or "-" for stdin."""
    if source == "-":
        return sys.stdin.buffer.read()

    path = Path(source)
    if not path.exists():
        raise click.ClickException(f"File not found: {source}")
    return path.read_bytes()


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def format_review_status(applicant_id: str, status: ReviewStatus) -> None:
    """Format and print an applicant's review status."""
    answer = status.review_result.review_answer
    if answer == "GREEN":
        answer_str = "[bold green]GREEN[/]"
        panel_style = "green"
    elif answer == "RED":
        answer_str = "[bold red]RED[/]"
        panel_style = "red"
    else:
        answer_str = f"[dim]{answer or 'n/a'}[/]"
        panel_style = "yellow"

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value")

    table.add_row("Applicant", applicant_id)
    table.add_row("Review Status", status.review_status or "n/a")
    table.add_row("Review Answer", answer_str)
    if status.review_id:
        table.add_row("Review ID", status.review_id)
    table.add_row("Attempts", str(status.attempt_cnt))
    if status.create_date:
        table.add_row("Created", status.create_date.isoformat())
    if status.review_date:
        table.add_row("Reviewed", status.review_date.isoformat())
    if status.review_result.reject_labels:
        table.add_row("Reject Labels", ", ".join(status.review_result.reject_labels))
    if status.review_result.moderation_comment:
        table.add_row("Comment", status.review_result.moderation_comment)

    console.print(Panel(table, title="Review Status", border_style=panel_style))


def report_error(error: Exception, json_output: bool) -> None:
    """Print an API or transport error."""
    if isinstance(error, APIError):
        data: dict[str, Any] = {"error": str(error), **error.to_dict()}
    else:
        data = {"error": str(error)}

    if json_output:
        console.print_json(data=data)
    else:
        console.print(f"[red]Error:[/] {error}")


def _client(ctx: click.Context) -> Client:
    params = ctx.obj
    if not params["token"] or not params["secret"]:
        raise click.UsageError("Both --token and --secret (or SUMSUB_APP_TOKEN and SUMSUB_SECRET_KEY) are required")
    config = ClientConfig(host=params["host"], timeout=params["timeout"])
    return Client(params["token"], params["secret"], config)


@click.group()
@click.option("--token", envvar="SUMSUB_APP_TOKEN", help="Application token")
@click.option("--secret", envvar="SUMSUB_SECRET_KEY", help="Application secret key")
@click.option("--host", envvar="SUMSUB_HOST", default=DEFAULT_HOST, show_default=True, help="API host")
@click.option(
    "--timeout",
    type=float,
    default=30.0,
    help="HTTP request timeout in seconds",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="sumsub-client")
@click.pass_context
def main(
    ctx: click.Context,
    token: str | None,
    secret: str | None,
    host: str,
    timeout: float,
    verbose: bool,
) -> None:
    """Sumsub API client tools."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True))],
        )
    ctx.obj = {"token": token, "secret": secret, "host": host, "timeout": timeout}


@main.command()
@click.option("--method", default="GET", show_default=True, help="HTTP method")
@click.option("--uri", required=True, help="Path and query string")
@click.option("--body", default="", help="Raw request body")
@click.option("--ts", type=int, default=None, help="Unix timestamp (defaults to now)")
@click.pass_context
def sign(ctx: click.Context, method: str, uri: str, body: str, ts: int | None) -> None:
    """Print the auth headers for a request."""
    secret = ctx.obj["secret"]
    if not secret:
        raise click.UsageError("--secret (or SUMSUB_SECRET_KEY) is required")

    ts = int(time.time()) if ts is None else ts
    signature = HMACSigner(secret).sign(ts, method.upper(), uri, body.encode("utf-8"))
    click.echo(f"X-App-Access-Ts: {ts}")
    click.echo(f"X-App-Access-Sig: {signature}")


@main.command("verify-webhook")
@click.argument("payload", required=True)
@click.option(
    "--webhook-secret",
    envvar="SUMSUB_WEBHOOK_SECRET",
    default="",
    help="Webhook secret key",
)
@click.option(
    "--alg",
    type=click.Choice([a.value for a in DigestAlgorithm]),
    default=DigestAlgorithm.HMAC_SHA256_HEX.value,
    show_default=True,
    help="Value of X-Payload-Digest-Alg",
)
@click.option("--digest", default="", help="Value of X-Payload-Digest")
@click.option("--json-output", is_flag=True, help="Output result as JSON")
def verify_webhook(
    payload: str,
    webhook_secret: str,
    alg: str,
    digest: str,
    json_output: bool,
) -> None:
    """Verify a webhook PAYLOAD (file path or "-" for stdin)."""
    body = read_payload(payload)

    try:
        verify_webhook_digest(body, webhook_secret, alg, digest)
    except WebhookVerificationError as e:
        if json_output:
            console.print_json(data={"valid": False, "reason": e.reason.name, "error": str(e)})
        else:
            console.print(Panel(f"[bold red]INVALID[/]: {e}", title="Webhook", border_style="red"))
        sys.exit(1)

    if json_output:
        console.print_json(data={"valid": True, "algorithm": alg})
    else:
        console.print(Panel(f"[bold green]VALID[/] ({alg})", title="Webhook", border_style="green"))


@main.command()
@click.option("--json-output", is_flag=True, help="Output result as JSON")
@click.pass_context
def health(ctx: click.Context, json_output: bool) -> None:
    """Check the operational status of the API."""
    with _client(ctx) as client:
        try:
            client.health()
        except SumsubError as e:
            report_error(e, json_output)
            sys.exit(1)
        except httpx.HTTPError as e:
            report_error(e, json_output)
            sys.exit(2)

    if json_output:
        console.print_json(data={"status": "ok", "host": client.host})
    else:
        console.print(f"[green]OK[/] {client.host}")


@main.command("review-status")
@click.argument("applicant_id", required=True)
@click.option("--json-output", is_flag=True, help="Output result as JSON")
@click.pass_context
def review_status(ctx: click.Context, applicant_id: str, json_output: bool) -> None:
    """Show the review status of APPLICANT_ID."""
    with _client(ctx) as client:
        try:
            status = client.applicant_review_status(applicant_id)
        except SumsubError as e:
            report_error(e, json_output)
            sys.exit(1)
        except httpx.HTTPError as e:
            report_error(e, json_output)
            sys.exit(2)

    if json_output:
        console.print_json(data=_jsonable(asdict(status)))
    else:
        format_review_status(applicant_id, status)


if __name__ == "__main__":
    main()
