"""capital hub initial schema

Revision ID: 0001_capital_hub_initial
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_capital_hub_initial"
down_revision = None
branch_labels = None
depends_on = None


MONEY = sa.Numeric(20, 2)
RATE = sa.Numeric(7, 4)
OWNERSHIP = sa.Numeric(12, 8)


def _id_column() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True, nullable=False)


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("created_by", sa.String(length=128), nullable=True),
        sa.Column("updated_by", sa.String(length=128), nullable=True),
    ]


def _fund_column(fk: bool = True, ondelete: str = "RESTRICT") -> sa.Column:
    fund_fk = [sa.ForeignKey("funds.id", ondelete=ondelete)] if fk else []
    return sa.Column("fund_id", sa.Uuid(), *fund_fk, nullable=False)


def _version_column() -> sa.Column:
    return sa.Column("version", sa.Integer(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "funds",
        _id_column(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("short_name", sa.String(length=50), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "fund_type",
            sa.Enum(
                "private_equity",
                "venture_capital",
                "infrastructure",
                "real_estate",
                "debt",
                "mezzanine",
                "fund_of_funds",
                "impact",
                "growth_equity",
                "search_fund",
                name="fund_type_enum",
            ),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(
                "formation",
                "fundraising",
                "investing",
                "harvest",
                "liquidation",
                "closed",
                name="fund_status_enum",
            ),
            nullable=False,
        ),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("inception_date", sa.Date(), nullable=True),
        sa.Column("target_size", MONEY, nullable=False),
        sa.Column("hard_cap", MONEY, nullable=False),
        sa.Column("min_commitment", MONEY, nullable=False),
        sa.Column("max_commitment", MONEY, nullable=False),
        sa.Column("gp_commitment", MONEY, nullable=False),
        sa.Column("management_fee_rate", RATE, nullable=False),
        sa.Column("carried_interest_rate", RATE, nullable=False),
        sa.Column("preferred_return_rate", RATE, nullable=False),
        sa.Column("gp_catchup_rate", RATE, nullable=False),
        sa.Column("waterfall_type", sa.Enum("american", "european", name="waterfall_type_enum"), nullable=False),
        sa.Column(
            "catch_up_base",
            sa.Enum("preferred_return", "lp_total", name="catch_up_base_enum"),
            nullable=False,
        ),
        sa.Column("max_single_investment_percent", RATE, nullable=False),
        sa.Column("max_sector_concentration_percent", RATE, nullable=False),
        sa.Column("max_geographic_concentration_percent", RATE, nullable=False),
        sa.Column("min_diversification", sa.Integer(), nullable=False),
        _version_column(),
        *_audit_columns(),
        sa.CheckConstraint("hard_cap >= target_size", name="ck_funds_hard_cap_gte_target"),
        sa.CheckConstraint("max_commitment >= min_commitment", name="ck_funds_max_gte_min_commitment"),
    )
    op.create_index("ix_funds_id", "funds", ["id"])
    op.create_index("ix_funds_name", "funds", ["name"], unique=True)
    op.create_index("ix_funds_status", "funds", ["status"])

    op.create_table(
        "audit_events",
        _id_column(),
        _fund_column(fk=False),
        sa.Column("actor_id", sa.String(length=200), nullable=False),
        sa.Column("actor_roles", sa.JSON(), nullable=False),
        sa.Column("action", sa.String(length=200), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=False),
        sa.Column("before", sa.JSON(), nullable=True),
        sa.Column("after", sa.JSON(), nullable=True),
        sa.Column("request_id", sa.String(length=64), nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_audit_events_fund_id", "audit_events", ["fund_id"])
    op.create_index("ix_audit_events_actor_id", "audit_events", ["actor_id"])
    op.create_index("ix_audit_events_action", "audit_events", ["action"])
    op.create_index("ix_audit_events_request_id", "audit_events", ["request_id"])
    op.create_index("ix_audit_events_fund_entity", "audit_events", ["fund_id", "entity_type", "entity_id"])
    op.create_index("ix_audit_events_fund_action", "audit_events", ["fund_id", "action"])

    op.create_table(
        "lp_commitments",
        _id_column(),
        _fund_column(),
        sa.Column("investor_id", sa.Uuid(), nullable=False),
        sa.Column("investor_name", sa.String(length=255), nullable=False),
        sa.Column("investor_type", sa.String(length=64), nullable=True),
        sa.Column("commitment_amount", MONEY, nullable=False),
        sa.Column("commitment_date", sa.Date(), nullable=False),
        sa.Column("commitment_currency", sa.String(length=3), nullable=False),
        sa.Column("exchange_rate", sa.Numeric(18, 8), nullable=True),
        sa.Column("capital_called", MONEY, nullable=False),
        sa.Column("capital_called_percent", OWNERSHIP, nullable=False),
        sa.Column("unfunded_commitment", MONEY, nullable=False),
        sa.Column("distributions_received", MONEY, nullable=False),
        sa.Column("recallable_distributions", MONEY, nullable=False),
        sa.Column("ownership_percent", OWNERSHIP, nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "active",
                "defaulted",
                "transferred",
                "redeemed",
                name="lp_commitment_status_enum",
            ),
            nullable=False,
        ),
        _version_column(),
        *_audit_columns(),
    )
    op.create_index("ix_lp_commitments_fund_id", "lp_commitments", ["fund_id"])
    op.create_index("ix_lp_commitments_investor_id", "lp_commitments", ["investor_id"])
    op.create_index("ix_lp_commitments_fund_investor", "lp_commitments", ["fund_id", "investor_id"])

    op.create_table(
        "capital_calls",
        _id_column(),
        _fund_column(),
        sa.Column("call_number", sa.Integer(), nullable=False),
        sa.Column("call_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column(
            "purpose",
            sa.Enum("investment", "management_fee", "expenses", "mixed", name="capital_call_purpose_enum"),
            nullable=False,
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("investment_amount", MONEY, nullable=False),
        sa.Column("management_fee_amount", MONEY, nullable=False),
        sa.Column("partnership_expenses_amount", MONEY, nullable=False),
        sa.Column("organizational_costs_amount", MONEY, nullable=False),
        sa.Column("total_call_amount", MONEY, nullable=False),
        sa.Column("amount_received", MONEY, nullable=False),
        sa.Column("amount_outstanding", MONEY, nullable=False),
        sa.Column("percent_funded", sa.Numeric(9, 4), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "draft",
                "issued",
                "partially_funded",
                "fully_funded",
                "overdue",
                "cancelled",
                name="capital_call_status_enum",
            ),
            nullable=False,
        ),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        _version_column(),
        *_audit_columns(),
        sa.UniqueConstraint("fund_id", "call_number", name="uq_capital_calls_fund_number"),
        sa.CheckConstraint("due_date >= call_date", name="ck_capital_calls_due_after_call"),
    )
    op.create_index("ix_capital_calls_fund_id", "capital_calls", ["fund_id"])
    op.create_index("ix_capital_calls_status", "capital_calls", ["status"])

    op.create_table(
        "capital_call_responses",
        _id_column(),
        _fund_column(fk=False),
        sa.Column(
            "capital_call_id",
            sa.Uuid(),
            sa.ForeignKey("capital_calls.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "lp_commitment_id",
            sa.Uuid(),
            sa.ForeignKey("lp_commitments.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("call_amount", MONEY, nullable=False),
        sa.Column("funded_amount", MONEY, nullable=False),
        sa.Column("funded_date", sa.Date(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "partial",
                "funded",
                "overdue",
                "defaulted",
                name="capital_call_response_status_enum",
            ),
            nullable=False,
        ),
        sa.Column("payment_reference", sa.String(length=128), nullable=True),
        *_audit_columns(),
        sa.UniqueConstraint("capital_call_id", "lp_commitment_id", name="uq_call_responses_call_lp"),
    )
    op.create_index("ix_capital_call_responses_capital_call_id", "capital_call_responses", ["capital_call_id"])
    op.create_index("ix_capital_call_responses_lp_commitment_id", "capital_call_responses", ["lp_commitment_id"])

    op.create_table(
        "distributions",
        _id_column(),
        _fund_column(),
        sa.Column("distribution_number", sa.Integer(), nullable=False),
        sa.Column("distribution_date", sa.Date(), nullable=False),
        sa.Column("record_date", sa.Date(), nullable=False),
        sa.Column("source_description", sa.Text(), nullable=True),
        sa.Column("total_distribution_amount", MONEY, nullable=False),
        sa.Column("breakdown", sa.JSON(), nullable=False),
        sa.Column("apply_waterfall", sa.Boolean(), nullable=False),
        sa.Column("waterfall_calculation", sa.JSON(), nullable=True),
        sa.Column("gp_amount", MONEY, nullable=False),
        sa.Column(
            "status",
            sa.Enum("draft", "approved", "paid", "cancelled", name="distribution_status_enum"),
            nullable=False,
        ),
        sa.Column("approved_by", sa.String(length=128), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        _version_column(),
        *_audit_columns(),
        sa.UniqueConstraint("fund_id", "distribution_number", name="uq_distributions_fund_number"),
    )
    op.create_index("ix_distributions_fund_id", "distributions", ["fund_id"])
    op.create_index("ix_distributions_status", "distributions", ["status"])

    op.create_table(
        "distribution_allocations",
        _id_column(),
        _fund_column(fk=False),
        sa.Column(
            "distribution_id",
            sa.Uuid(),
            sa.ForeignKey("distributions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "lp_commitment_id",
            sa.Uuid(),
            sa.ForeignKey("lp_commitments.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("ownership_percent", OWNERSHIP, nullable=False),
        sa.Column("gross_amount", MONEY, nullable=False),
        sa.Column("tax_withheld", MONEY, nullable=False),
        sa.Column("net_amount", MONEY, nullable=False),
        sa.Column("breakdown", sa.JSON(), nullable=False),
        sa.Column("paid_date", sa.Date(), nullable=True),
        sa.Column("payment_reference", sa.String(length=128), nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "paid", "held", name="distribution_allocation_status_enum"),
            nullable=False,
        ),
        *_audit_columns(),
        sa.UniqueConstraint("distribution_id", "lp_commitment_id", name="uq_distribution_allocations_dist_lp"),
    )
    op.create_index("ix_distribution_allocations_distribution_id", "distribution_allocations", ["distribution_id"])
    op.create_index("ix_distribution_allocations_lp_commitment_id", "distribution_allocations", ["lp_commitment_id"])

    valuation_method = sa.Enum(
        "cost",
        "market",
        "revenue_multiple",
        "ebitda_multiple",
        "dcf",
        "comparable",
        "third_party",
        name="valuation_method_enum",
    )

    op.create_table(
        "portfolio_investments",
        _id_column(),
        _fund_column(),
        sa.Column("company_name", sa.String(length=255), nullable=False),
        sa.Column("company_description", sa.Text(), nullable=True),
        sa.Column(
            "sector",
            sa.Enum(
                "infrastructure",
                "healthcare",
                "agriculture",
                "technology",
                "financial_services",
                "manufacturing",
                "real_estate",
                "education",
                "energy",
                "consumer_goods",
                "tourism",
                "logistics",
                name="investment_sector_enum",
            ),
            nullable=False,
        ),
        sa.Column(
            "geography",
            sa.Enum(
                "uganda",
                "kenya",
                "tanzania",
                "rwanda",
                "ethiopia",
                "drc",
                "south_sudan",
                "east_africa_other",
                "pan_africa",
                name="investment_geography_enum",
            ),
            nullable=False,
        ),
        sa.Column("investment_date", sa.Date(), nullable=False),
        sa.Column("initial_investment", MONEY, nullable=False),
        sa.Column("follow_on_investments", MONEY, nullable=False),
        sa.Column("total_invested", MONEY, nullable=False),
        sa.Column("ownership_percent", OWNERSHIP, nullable=False),
        sa.Column("board_seats", sa.Integer(), nullable=False),
        sa.Column("current_valuation", MONEY, nullable=False),
        sa.Column("valuation_date", sa.Date(), nullable=False),
        sa.Column("valuation_method", valuation_method, nullable=False),
        sa.Column("realized_value", MONEY, nullable=False),
        sa.Column("unrealized_value", MONEY, nullable=False),
        sa.Column("total_value", MONEY, nullable=False),
        sa.Column("moic", sa.Numeric(12, 4), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "committed",
                "funded",
                "active",
                "impaired",
                "realized",
                "written_off",
                name="investment_status_enum",
            ),
            nullable=False,
        ),
        sa.Column("impairment_notes", sa.Text(), nullable=True),
        sa.Column("exit_date", sa.Date(), nullable=True),
        sa.Column(
            "exit_type",
            sa.Enum("ipo", "acquisition", "secondary", "buyback", "write_off", name="exit_type_enum"),
            nullable=True,
        ),
        sa.Column("exit_proceeds", MONEY, nullable=True),
        sa.Column("exit_multiple", sa.Numeric(12, 4), nullable=True),
        _version_column(),
        *_audit_columns(),
    )
    op.create_index("ix_portfolio_investments_fund_id", "portfolio_investments", ["fund_id"])
    op.create_index("ix_portfolio_investments_sector", "portfolio_investments", ["sector"])
    op.create_index("ix_portfolio_investments_geography", "portfolio_investments", ["geography"])
    op.create_index("ix_portfolio_investments_status", "portfolio_investments", ["status"])

    op.create_table(
        "valuation_records",
        _id_column(),
        _fund_column(fk=False),
        sa.Column(
            "investment_id",
            sa.Uuid(),
            sa.ForeignKey("portfolio_investments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("valuation_date", sa.Date(), nullable=False),
        sa.Column("previous_valuation", MONEY, nullable=False),
        sa.Column("new_valuation", MONEY, nullable=False),
        sa.Column("change_percent", sa.Numeric(12, 4), nullable=False),
        sa.Column("valuation_method", valuation_method, nullable=False),
        sa.Column("methodology", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_valuation_records_investment_id", "valuation_records", ["investment_id"])

    op.create_table(
        "fund_metrics_snapshots",
        _id_column(),
        _fund_column(ondelete="CASCADE"),
        sa.Column("total_commitments", MONEY, nullable=False),
        sa.Column("capital_called", MONEY, nullable=False),
        sa.Column("capital_called_percent", sa.Numeric(9, 4), nullable=False),
        sa.Column("unfunded_commitments", MONEY, nullable=False),
        sa.Column("distributions_paid", MONEY, nullable=False),
        sa.Column("recallable_capital", MONEY, nullable=False),
        sa.Column("total_invested", MONEY, nullable=False),
        sa.Column("realized_value", MONEY, nullable=False),
        sa.Column("unrealized_value", MONEY, nullable=False),
        sa.Column("total_value", MONEY, nullable=False),
        sa.Column("dpi", sa.Float(), nullable=False),
        sa.Column("rvpi", sa.Float(), nullable=False),
        sa.Column("tvpi", sa.Float(), nullable=False),
        sa.Column("irr", sa.Float(), nullable=False),
        sa.Column("moic", sa.Float(), nullable=False),
        sa.Column("active_investments", sa.Integer(), nullable=False),
        sa.Column("realized_investments", sa.Integer(), nullable=False),
        sa.Column("total_investments", sa.Integer(), nullable=False),
        sa.Column("lp_count", sa.Integer(), nullable=False),
        sa.Column("calculated_at", sa.DateTime(timezone=True), nullable=False),
        _version_column(),
        *_audit_columns(),
    )
    op.create_index("ix_fund_metrics_snapshots_fund_id", "fund_metrics_snapshots", ["fund_id"], unique=True)

    op.create_table(
        "lp_reports",
        _id_column(),
        _fund_column(),
        sa.Column(
            "report_type",
            sa.Enum(
                "quarterly",
                "annual",
                "capital_call",
                "distribution",
                "k1",
                "custom",
                name="lp_report_type_enum",
            ),
            nullable=False,
        ),
        sa.Column("report_period_start", sa.Date(), nullable=False),
        sa.Column("report_period_end", sa.Date(), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column(
            "status",
            sa.Enum("draft", "review", "approved", "distributed", name="lp_report_status_enum"),
            nullable=False,
        ),
        sa.Column("performance_summary", sa.JSON(), nullable=False),
        sa.Column("portfolio_summary", sa.JSON(), nullable=False),
        sa.Column("capital_summary", sa.JSON(), nullable=False),
        sa.Column("quartile", sa.Integer(), nullable=False),
        sa.Column("recipient_investor_ids", sa.JSON(), nullable=False),
        sa.Column("distributed_at", sa.DateTime(timezone=True), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_lp_reports_fund_id", "lp_reports", ["fund_id"])
    op.create_index("ix_lp_reports_status", "lp_reports", ["status"])
    op.create_index("ix_lp_reports_report_period_end", "lp_reports", ["report_period_end"])


def downgrade() -> None:
    for table in (
        "lp_reports",
        "fund_metrics_snapshots",
        "valuation_records",
        "portfolio_investments",
        "distribution_allocations",
        "distributions",
        "capital_call_responses",
        "capital_calls",
        "lp_commitments",
        "audit_events",
        "funds",
    ):
        op.drop_table(table)
