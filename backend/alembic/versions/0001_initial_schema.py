from alembic import op
import sqlalchemy as sa


revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "pcgroups",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "pcs",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("number", sa.String(20), nullable=False, unique=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="available", index=True),
        sa.Column("group", sa.Integer(), nullable=True, index=True),
        sa.Column("position", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["group"], ["pcgroups.id"], ondelete="SET NULL"),
    )
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("nickname", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("name", sa.String(255), nullable=False, index=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("group", sa.Integer(), nullable=True, index=True),
        sa.ForeignKeyConstraint(["group"], ["pcgroups.id"], ondelete="SET NULL"),
    )
    op.create_table(
        "sessions",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("client_id", sa.Integer(), nullable=True, index=True),
        sa.Column("pc_id", sa.Integer(), nullable=True, index=True),
        sa.Column("pc_number", sa.String(20), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("mode", sa.String(20), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active", index=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=True, server_default="0"),
        sa.Column("advance_payment", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("money_advance", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("yape", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("plin", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("cash", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("debt", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("change", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("observation", sa.Text(), nullable=True),
        sa.Column("optional_client", sa.String(255), nullable=True),
        sa.Column("debt_override_reason", sa.String(500), nullable=True),
        sa.Column("closed_by", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["pc_id"], ["pcs.id"], ondelete="SET NULL"),
    )
    # Una sola sesion activa por PC
    op.create_index(
        "uq_sessions_active_pc",
        "sessions",
        ["pc_id"],
        unique=True,
        sqlite_where=sa.text("status = 'active'"),
        postgresql_where=sa.text("status = 'active'"),
    )
    op.create_table(
        "consumptions",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("session_id", sa.Integer(), nullable=False, index=True),
        sa.Column("product_name", sa.String(255), nullable=False, index=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
        sa.ForeignKeyConstraint(["session_id"], ["sessions.id"], ondelete="CASCADE"),
    )
    op.create_table(
        "debits",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("client_id", sa.Integer(), nullable=True, index=True),
        sa.Column("client_name", sa.String(255), nullable=True),
        sa.Column("pc_id", sa.Integer(), nullable=True),
        sa.Column("pc_number", sa.String(20), nullable=True),
        sa.Column("session_id", sa.Integer(), nullable=True, unique=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("original_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("status", sa.Boolean(), nullable=False, server_default=sa.false(), index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["pc_id"], ["pcs.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["session_id"], ["sessions.id"], ondelete="SET NULL"),
    )
    op.create_table(
        "debits_details",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("debts_id", sa.Integer(), nullable=False, index=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_method", sa.String(20), nullable=False, server_default="cash"),
        sa.Column("details", sa.String(500), nullable=True),
        sa.Column("idempotency_key", sa.String(100), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
        sa.ForeignKeyConstraint(["debts_id"], ["debits.id"], ondelete="CASCADE"),
    )
    op.create_table(
        "mov_contable",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("type", sa.String(20), nullable=False, index=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("detail", sa.String(500), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
    )
    op.create_table(
        "status_history",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("entity_type", sa.String(20), nullable=False, index=True),
        sa.Column("entity_id", sa.Integer(), nullable=False, index=True),
        sa.Column("old_status", sa.String(50), nullable=True),
        sa.Column("new_status", sa.String(50), nullable=False),
        sa.Column("operator", sa.String(255), nullable=True),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("status_history")
    op.drop_table("mov_contable")
    op.drop_table("debits_details")
    op.drop_table("debits")
    op.drop_table("consumptions")
    op.drop_index("uq_sessions_active_pc", table_name="sessions")
    op.drop_table("sessions")
    op.drop_table("products")
    op.drop_table("clients")
    op.drop_table("pcs")
    op.drop_table("pcgroups")
