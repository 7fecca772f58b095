"""
CLI interface for FAIB Internal Tools.
Uses Typer for commands and Rich for output.
"""

from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from faib_tools.config import get_settings
from faib_tools.models import ApplicationStatus, Recommendation
from faib_tools.services.note_formatter import format_pricing_breakdown
from faib_tools.services.pricing import (
    PRICING_BRACKETS,
    TRAINER_FEE,
    VAT_RATE,
    calculate_renewal_pricing,
    format_money,
    get_bracket_description,
)
from faib_tools.services.review_service import ReviewService
from faib_tools.services.sheepcrm_service import CrmUri, SheepCRMClient, SheepCRMError
from faib_tools.services.storage_service import get_storage_service, licence_filename

app = typer.Typer(
    name="faib-tools",
    help="FAIB internal tools: renewal pricing, form reviews and licences",
    no_args_is_help=True,
)

console = Console()


def _fail(message: str):
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def _configured(value) -> str:
    return "[green]Configured[/green]" if value else "[yellow]Not configured[/yellow]"


# ============================================================================
# Status
# ============================================================================
@app.command("status")
def show_status():
    """Show which integrations are configured."""
    settings = get_settings()

    console.print(Panel.fit(
        f"[bold]{settings.app_name}[/bold]\n"
        f"SheepCRM: {_configured(settings.is_sheepcrm_configured())}"
        f" ({settings.sheepcrm_bucket or '-'})\n"
        f"Claude API: {_configured(settings.anthropic_api_key)} ({settings.claude_model})\n"
        f"Licence storage: {_configured(settings.s3_bucket)}\n"
        f"Webhook secret: {_configured(settings.sheepcrm_webhook_secret)}",
        title="System Status",
        border_style="blue",
    ))


# ============================================================================
# Pricing Commands
# ============================================================================
@app.command("pricing")
def show_pricing(
    certificates: int = typer.Argument(..., help="Certificates issued in the last 12 months"),
    trainers: int = typer.Argument(..., help="Number of trainers renewing"),
):
    """Calculate the renewal cost for a training provider."""
    breakdown = calculate_renewal_pricing(certificates, trainers)
    console.print(format_pricing_breakdown(breakdown))


@app.command("pricing-table")
def show_pricing_table():
    """Show the membership fee brackets."""
    table = Table(title="Renewal Pricing Brackets", box=box.ROUNDED)
    table.add_column("Certificates", style="cyan")
    table.add_column("Fee (ex VAT)", justify="right")
    table.add_column("Fee (inc VAT)", justify="right", style="green")

    for bracket in PRICING_BRACKETS:
        price = bracket.price_ex_vat
        table.add_row(
            get_bracket_description(bracket).replace(" certificates", ""),
            format_money(price),
            format_money(price + price * VAT_RATE),
        )

    console.print(table)
    console.print(f"[dim]Plus {format_money(TRAINER_FEE)} + VAT per trainer[/dim]")


# ============================================================================
# Renewal Commands
# ============================================================================
renewal_app = typer.Typer(help="Review renewal form submissions")
app.add_typer(renewal_app, name="renewal")


@renewal_app.command("analyze")
def analyze_renewal(
    form_response_uri: str = typer.Argument(..., help="Form response URI, e.g. /faib/form_response/<id>/"),
    post: bool = typer.Option(False, "--post", help="Post the note to the organisation's journal"),
):
    """Price and review a renewal form submission."""
    service = ReviewService()

    try:
        with console.status("Analyzing renewal form..."):
            review = service.review_renewal(form_response_uri, post_to_crm=post)
    except (SheepCRMError, ValueError) as e:
        _fail(str(e))

    submission = review.submission
    counts = submission.certificate_counts

    table = Table(title=submission.organization_name, box=box.ROUNDED)
    table.add_column("Course", style="cyan")
    table.add_column("Certificates", justify="right")
    for label, value in (
        ("EFAW", counts.efaw),
        ("PFA", counts.pfa),
        ("EPFA", counts.epfa),
        ("BLS + AED", counts.bls_aed),
        ("FAW", counts.faw),
    ):
        table.add_row(label, f"{value:,}")
    table.add_row("─" * 12, "─" * 6, style="dim")
    table.add_row("[bold]Total[/bold]", f"[bold]{counts.total:,}[/bold]")
    console.print(table)

    console.print(Panel(Text(review.note), title="Journal Note", border_style="blue"))

    if review.posted:
        console.print(f"[green]Journal note created:[/green] {review.journal_entry_uri}")
    else:
        console.print("[dim]Not posted. Use --post to create the journal note.[/dim]")


# ============================================================================
# Assessor Application Commands
# ============================================================================
assessor_app = typer.Typer(help="Review Trainer/Assessor applications")
app.add_typer(assessor_app, name="assessor")

RECOMMENDATION_COLORS = {
    Recommendation.APPROVE: "green",
    Recommendation.REQUEST_MORE_INFO: "yellow",
    Recommendation.REJECT: "red",
}


@assessor_app.command("list")
def list_applications(
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Filter by status"),
    limit: int = typer.Option(50, "--limit", "-n", help="Number of results"),
):
    """List Trainer/Assessor applications."""
    status_filter = None
    if status:
        try:
            status_filter = ApplicationStatus(status.lower())
        except ValueError:
            _fail(f"Invalid status: {status}")

    try:
        applications = ReviewService().list_assessor_applications(status=status_filter, limit=limit)
    except (SheepCRMError, ValueError) as e:
        _fail(str(e))

    if not applications:
        console.print("[dim]No applications found.[/dim]")
        return

    table = Table(title=f"Assessor Applications ({len(applications)})", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Applicant", style="cyan")
    table.add_column("Submitted")
    table.add_column("Status")
    table.add_column("Reviewed", justify="center")

    for application in applications:
        table.add_row(
            application["id"],
            application["applicant_name"],
            (application["submission_date"] or "-")[:10],
            application["status"],
            "✓" if application["has_internal_comments"] else "",
        )

    console.print(table)


@assessor_app.command("analyze")
def analyze_application(
    application_id: str = typer.Argument(..., help="Form response ID"),
    post: bool = typer.Option(False, "--post", help="Save the review to the internal comments"),
):
    """Run the AI review of a Trainer/Assessor application."""
    service = ReviewService()

    try:
        with console.status("Analyzing application..."):
            review = service.review_assessor_application(application_id, post_to_crm=post)
    except (SheepCRMError, ValueError) as e:
        _fail(str(e))

    application = review.application
    console.print(
        f"[bold]{application.applicant_name}[/bold]: "
        f"{len(application.required_attachments)} required, "
        f"{len(application.additional_attachments)} additional document(s)"
    )

    color = RECOMMENDATION_COLORS.get(review.analysis.recommendation, "white")
    console.print(Panel(Text(review.note), title="Application Review", border_style=color))

    if review.posted:
        console.print("[green]Review saved to internal comments.[/green]")


# ============================================================================
# Licence Commands
# ============================================================================
licence_app = typer.Typer(help="Manage training provider licences")
app.add_typer(licence_app, name="licence")


@licence_app.command("list")
def list_licences(
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
    limit: int = typer.Option(20, "--limit", "-n", help="Results per page"),
):
    """List stored licence PDFs, newest first."""
    try:
        result = get_storage_service().list_licences(page=page, limit=limit)
    except ValueError as e:
        _fail(str(e))

    table = Table(title=f"Licences (page {result['page']} of {max(result['total_pages'], 1)})", box=box.ROUNDED)
    table.add_column("Path", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Modified")

    for item in result["files"]:
        modified = item["last_modified"].strftime("%Y-%m-%d %H:%M") if item["last_modified"] else "-"
        table.add_row(item["path"], f"{item['size_bytes'] / 1024:.1f} KB", modified)

    console.print(table)
    console.print(f"[dim]{result['total']} licence(s) in total[/dim]")


@licence_app.command("upload")
def upload_licence(
    member_uri: str = typer.Argument(..., help="Member record URI, e.g. /faib/member/<id>/"),
    pdf: Path = typer.Argument(..., exists=True, dir_okay=False, help="Licence PDF to upload"),
):
    """Upload a licence PDF for a training provider membership."""
    try:
        CrmUri.parse(member_uri)
        data = SheepCRMClient().get_certificate_data_from_member(member_uri)
        year = int(data.membership_start_date[:4])
        result = get_storage_service().upload_licence(
            year,
            licence_filename(data.licence_number, data.company_name),
            pdf.read_bytes(),
            certificate_data=data.to_dict(),
        )
    except (SheepCRMError, ValueError) as e:
        _fail(str(e))

    console.print(f"[green]Uploaded licence for {data.company_name}:[/green] {result['path']}")


# ============================================================================
# Server Commands
# ============================================================================
@app.command("serve")
def start_server(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
):
    """Start the FastAPI web server."""
    import uvicorn

    console.print(f"[blue]Starting server at http://{host}:{port}[/blue]")
    uvicorn.run(
        "faib_tools.api:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
