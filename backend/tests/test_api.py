from __future__ import annotations

import uuid
from decimal import Decimal

from conftest import actor_header


def _commit(client, fund_id: str, amount: str, name: str) -> dict:
    r = client.post(
        f"/funds/{fund_id}/capital/commitments",
        json={
            "investor_id": str(uuid.uuid4()),
            "investor_name": name,
            "commitment_amount": amount,
            "commitment_date": "2024-01-15",
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers.get("X-Request-ID")


def test_missing_actor_header_is_unauthorized(client):
    r = client.get(f"/funds/{uuid.uuid4()}/capital/calls")
    assert r.status_code == 401


def test_fund_scope_and_roles_are_enforced(client, seeded_fund):
    fund_id = seeded_fund["fund_id"]

    other_fund = actor_header(fund_ids=[str(uuid.uuid4())], roles=["GP"])
    r = client.get(f"/funds/{fund_id}/capital/calls", headers=other_fund)
    assert r.status_code == 403

    auditor = actor_header(fund_ids=[fund_id], roles=["AUDITOR"])
    r = client.get(f"/funds/{fund_id}/capital/calls", headers=auditor)
    assert r.status_code == 200
    r = client.post(
        f"/funds/{fund_id}/capital/calls",
        headers=auditor,
        json={"call_date": "2024-03-01", "due_date": "2024-03-31", "investment_amount": "1000"},
    )
    assert r.status_code == 403


def test_capital_lifecycle_over_http(client, seeded_fund):
    fund_id = seeded_fund["fund_id"]
    lp_a = _commit(client, fund_id, "600000", "LP A")
    _commit(client, fund_id, "400000", "LP B")

    r = client.post(
        f"/funds/{fund_id}/capital/calls",
        json={"call_date": "2024-03-01", "due_date": "2024-03-31", "investment_amount": "150000"},
    )
    assert r.status_code == 201, r.text
    call = r.json()
    assert Decimal(call["total_call_amount"]) == Decimal("150000")
    assert sorted(Decimal(x["call_amount"]) for x in call["responses"]) == [Decimal("60000"), Decimal("90000")]

    r = client.post(f"/funds/{fund_id}/capital/calls/{call['id']}/issue")
    assert r.status_code == 200
    assert r.json()["status"] == "issued"

    r = client.post(
        f"/funds/{fund_id}/capital/calls/{call['id']}/fundings",
        json={"lp_commitment_id": lp_a["id"], "amount": "200000"},
    )
    assert r.status_code == 400

    r = client.post(
        f"/funds/{fund_id}/capital/calls/{call['id']}/fundings",
        json={"lp_commitment_id": lp_a["id"], "amount": "90000"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "partially_funded"

    r = client.post(f"/funds/{fund_id}/capital/distributions/waterfall/preview", json={"amount": "50000"})
    assert r.status_code == 200
    preview = r.json()
    assert Decimal(preview["total_to_lp"]) + Decimal(preview["total_to_gp"]) == Decimal("50000")

    r = client.post(f"/funds/{fund_id}/capital/metrics/recalculate")
    assert r.status_code == 200
    assert Decimal(r.json()["capital_called"]) == Decimal("0")
    assert Decimal(r.json()["unfunded_commitments"]) == Decimal("910000")

    r = client.get(f"/funds/{fund_id}/capital/metrics")
    assert r.status_code == 200
    assert r.json()["lp_count"] == 2


def test_unknown_call_is_404(client, seeded_fund):
    fund_id = seeded_fund["fund_id"]
    r = client.get(f"/funds/{fund_id}/capital/calls/{uuid.uuid4()}")
    assert r.status_code == 404


def test_metrics_not_yet_calculated_is_404(client, seeded_fund):
    r = client.get(f"/funds/{seeded_fund['fund_id']}/capital/metrics")
    assert r.status_code == 404


def test_portfolio_and_concentration_over_http(client, seeded_fund):
    fund_id = seeded_fund["fund_id"]
    for company, amount in (("Alpha", "500000"), ("Beta", "300000"), ("Gamma", "200000")):
        r = client.post(
            f"/funds/{fund_id}/capital/portfolio/investments",
            json={
                "company_name": company,
                "sector": "agriculture",
                "geography": "tanzania",
                "investment_date": "2024-05-01",
                "initial_investment": amount,
            },
        )
        assert r.status_code == 201, r.text

    r = client.get(f"/funds/{fund_id}/capital/portfolio/concentration")
    assert r.status_code == 200
    body = r.json()
    assert body["investment_count"] == 3
    assert abs(body["herfindahl_index"] - 0.38) < 1e-9
    assert body["sector_allocation"][0]["key"] == "agriculture"
    assert "Largest investment (50.0%) exceeds 20% threshold" in body["notes"]


def test_lp_report_over_http(client, seeded_fund):
    fund_id = seeded_fund["fund_id"]
    r = client.post(
        f"/funds/{fund_id}/capital/reports",
        json={
            "report_type": "annual",
            "report_period_start": "2024-01-01",
            "report_period_end": "2024-12-31",
            "title": "2024 Annual Report",
        },
    )
    assert r.status_code == 201, r.text
    report = r.json()
    assert report["quartile"] == 4

    r = client.patch(f"/funds/{fund_id}/capital/reports/{report['id']}/status", json={"status": "approved"})
    assert r.status_code == 400


def test_fund_update_and_listing(client, seeded_fund):
    fund_id = seeded_fund["fund_id"]
    r = client.patch(f"/funds/{fund_id}", json={"preferred_return_rate": "10"})
    assert r.status_code == 200
    assert Decimal(r.json()["preferred_return_rate"]) == Decimal("10")

    r = client.get("/funds", headers=actor_header(fund_ids=[fund_id], roles=["GP"]))
    assert [f["id"] for f in r.json()] == [fund_id]


def test_audit_trail_carries_request_id_and_actor(client, seeded_fund):
    fund_id = seeded_fund["fund_id"]
    r = client.post(
        f"/funds/{fund_id}/capital/commitments",
        headers={"X-Request-ID": "req-commit-1"},
        json={
            "investor_id": str(uuid.uuid4()),
            "investor_name": "LP Audit",
            "commitment_amount": "250000",
            "commitment_date": "2024-01-15",
        },
    )
    assert r.status_code == 201, r.text
    commitment_id = r.json()["id"]

    r = client.get(f"/funds/{fund_id}/audit-events", params={"action": "lp_commitment.created"})
    assert r.status_code == 200
    events = r.json()
    assert len(events) == 1
    assert events[0]["entity_id"] == commitment_id
    assert events[0]["request_id"] == "req-commit-1"
    assert events[0]["actor_id"] == "api-user"
    assert events[0]["actor_roles"] == ["ADMIN"]
    assert events[0]["after"]["commitment_amount"] == "250000.00"

    investor = actor_header(fund_ids=[fund_id], roles=["INVESTOR"])
    r = client.get(f"/funds/{fund_id}/audit-events", headers=investor)
    assert r.status_code == 403


def test_sub_cent_amounts_are_rejected_at_the_boundary(client, seeded_fund):
    fund_id = seeded_fund["fund_id"]
    r = client.post(
        f"/funds/{fund_id}/capital/distributions/waterfall/preview",
        json={"amount": "50000.005"},
    )
    assert r.status_code == 422

    r = client.post(
        f"/funds/{fund_id}/capital/distributions/waterfall/preview",
        json={"amount": "50000.05"},
    )
    assert r.status_code == 200, r.text


def test_fund_limits_do_not_change_concentration_thresholds(client, seeded_fund):
    fund_id = seeded_fund["fund_id"]
    r = client.patch(f"/funds/{fund_id}", json={"max_single_investment_percent": "60"})
    assert r.status_code == 200, r.text

    for company, amount in (("Alpha", "500000"), ("Beta", "500000")):
        r = client.post(
            f"/funds/{fund_id}/capital/portfolio/investments",
            json={
                "company_name": company,
                "sector": "infrastructure",
                "geography": "kenya",
                "investment_date": "2024-05-01",
                "initial_investment": amount,
            },
        )
        assert r.status_code == 201, r.text

    notes = client.get(f"/funds/{fund_id}/capital/portfolio/concentration").json()["notes"]
    assert "Largest investment (50.0%) exceeds 20% threshold" in notes
