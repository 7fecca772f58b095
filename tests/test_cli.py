"""
Tests for the Typer CLI.
"""

import pytest
from typer.testing import CliRunner

from factories import RENEWAL_URI, FakeCRM, make_renewal_response, make_settings

from faib_tools import cli
from faib_tools.services.review_service import ReviewService
from faib_tools.services.sheepcrm_service import SheepCRMError

runner = CliRunner()


@pytest.fixture
def crm():
    return FakeCRM(form_responses={RENEWAL_URI: make_renewal_response()})


@pytest.fixture
def use_fake_crm(monkeypatch, crm, renewal_analysis_service):
    monkeypatch.setattr(
        cli,
        "ReviewService",
        lambda: ReviewService(crm=crm, analysis=renewal_analysis_service, settings=make_settings()),
    )


def test_pricing():
    result = runner.invoke(cli.app, ["pricing", "100", "2"])
    assert result.exit_code == 0
    assert "Membership Fee (0-500 certificates):" in result.output
    assert "TOTAL RENEWAL COST: £468.00 (inc. VAT)" in result.output


def test_pricing_table():
    result = runner.invoke(cli.app, ["pricing-table"])
    assert result.exit_code == 0
    assert "15,000+" in result.output
    assert "£6300.00" in result.output


def test_status():
    result = runner.invoke(cli.app, ["status"])
    assert result.exit_code == 0
    assert "SheepCRM" in result.output


def test_renewal_analyze(use_fake_crm, crm):
    result = runner.invoke(cli.app, ["renewal", "analyze", RENEWAL_URI])
    assert result.exit_code == 0
    assert "Acme First Aid Ltd" in result.output
    assert "268" in result.output
    assert "Not posted" in result.output
    assert crm.journal_notes == []


def test_renewal_analyze_and_post(use_fake_crm, crm):
    result = runner.invoke(cli.app, ["renewal", "analyze", RENEWAL_URI, "--post"])
    assert result.exit_code == 0
    assert "Journal note created" in result.output
    assert len(crm.journal_notes) == 1


def test_crm_error_exits_1(monkeypatch, renewal_analysis_service):
    failing = FakeCRM(error=SheepCRMError("SheepCRM API Error (401): Unauthorized", status_code=401))
    monkeypatch.setattr(
        cli,
        "ReviewService",
        lambda: ReviewService(crm=failing, analysis=renewal_analysis_service, settings=make_settings()),
    )
    result = runner.invoke(cli.app, ["renewal", "analyze", RENEWAL_URI])
    assert result.exit_code == 1
    assert "Unauthorized" in result.output


def test_assessor_list_invalid_status():
    result = runner.invoke(cli.app, ["assessor", "list", "--status", "pending"])
    assert result.exit_code == 1
    assert "Invalid status" in result.output
