"""teryt registry foundation

Revision ID: 4b1e2c7d9a10
Revises:
Create Date: 2026-10-19 10:12:00.000000

"""
import os
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b1e2c7d9a10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


class PGPoint(sa.types.UserDefinedType):
    def get_col_spec(self, **kw):
        return "POINT"


def _schema():
    # ten sam schemat co ORM (DB_SCHEMA); pusty = domyślny search_path
    return os.getenv("DB_SCHEMA", "").strip() or None


def _fk(schema, table: str, column: str) -> str:
    return f"{schema}.{table}.{column}" if schema else f"{table}.{column}"


def upgrade() -> None:
    schema = _schema()
    if schema:
        op.execute(f"CREATE SCHEMA IF NOT EXISTS {schema}")

    # -------------------------
    # słowniki TERYT
    # -------------------------
    op.create_table(
        "voivodeships",
        sa.Column("code", sa.String(length=8), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        schema=schema,
    )
    op.create_table(
        "districts",
        sa.Column("code", sa.String(length=8), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("voivodeship_code", sa.String(length=8), nullable=False),
        sa.ForeignKeyConstraint(["voivodeship_code"], [_fk(schema, "voivodeships", "code")]),
        schema=schema,
    )
    op.create_table(
        "communities",
        sa.Column("code", sa.String(length=8), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=True),
        sa.Column("district_code", sa.String(length=8), nullable=False),
        sa.ForeignKeyConstraint(["district_code"], [_fk(schema, "districts", "code")]),
        schema=schema,
    )
    op.create_table(
        "cities",
        sa.Column("code", sa.String(length=8), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("community_code", sa.String(length=8), nullable=False),
        sa.ForeignKeyConstraint(["community_code"], [_fk(schema, "communities", "code")]),
        schema=schema,
    )
    op.create_table(
        "city_districts",
        sa.Column("code", sa.String(length=8), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("city_code", sa.String(length=8), nullable=False),
        sa.ForeignKeyConstraint(["city_code"], [_fk(schema, "cities", "code")]),
        schema=schema,
    )
    op.create_table(
        "streets",
        sa.Column("code", sa.String(length=8), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("city_code", sa.String(length=8), nullable=False),
        sa.ForeignKeyConstraint(["city_code"], [_fk(schema, "cities", "code")]),
        schema=schema,
    )
    for table, col in (
        ("districts", "voivodeship_code"),
        ("communities", "district_code"),
        ("cities", "community_code"),
        ("city_districts", "city_code"),
        ("streets", "city_code"),
    ):
        op.create_index(f"ix_{table}_{col}", table, [col], unique=False, schema=schema)

    # -------------------------
    # providers
    # -------------------------
    op.create_table(
        "providers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("technology", sa.String(length=100), nullable=False),
        sa.Column("bandwidth", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.CheckConstraint("bandwidth > 0", name="ck_providers_bandwidth_positive"),
        schema=schema,
    )
    op.create_index(
        "uq_providers_name_ci",
        "providers",
        [sa.text("lower(name)")],
        unique=True,
        schema=schema,
    )

    # -------------------------
    # buildings
    # -------------------------
    op.create_table(
        "buildings",
        sa.Column("id", sa.Uuid(), primary_key=True),

        sa.Column("voivodeship_code", sa.String(length=8), nullable=False),
        sa.Column("district_code", sa.String(length=8), nullable=False),
        sa.Column("community_code", sa.String(length=8), nullable=False),
        sa.Column("city_code", sa.String(length=8), nullable=False),
        sa.Column("city_district_code", sa.String(length=8), nullable=True),
        sa.Column("street_code", sa.String(length=8), nullable=True),

        sa.Column("voivodeship_name", sa.Text(), nullable=False),
        sa.Column("district_name", sa.Text(), nullable=False),
        sa.Column("community_name", sa.Text(), nullable=False),
        sa.Column("city_name", sa.Text(), nullable=False),
        sa.Column("city_district_name", sa.Text(), nullable=True),
        sa.Column("street_name", sa.Text(), nullable=True),

        sa.Column("building_number", sa.String(length=32), nullable=False),
        sa.Column("building_number_norm", sa.String(length=32), nullable=False),
        sa.Column("post_code", sa.String(length=6), nullable=True),

        sa.Column("location", PGPoint(), nullable=False),

        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), server_default=sa.text("'active'"), nullable=False),

        sa.Column("created_by", sa.String(length=64), nullable=False),
        sa.Column("updated_by", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),

        sa.ForeignKeyConstraint(["provider_id"], [_fk(schema, "providers", "id")], ondelete="RESTRICT"),
        sa.CheckConstraint("status IN ('active', 'deleted')", name="ck_buildings_status"),
        schema=schema,
    )
    for col in ("voivodeship_code", "district_code", "community_code", "city_code", "provider_id"):
        op.create_index(f"ix_buildings_{col}", "buildings", [col], unique=False, schema=schema)

    # jeden aktywny budynek na adres; brak ulicy = '' w kluczu
    op.create_index(
        "uq_buildings_active_address",
        "buildings",
        [sa.text("city_code"), sa.text("coalesce(street_code, '')"), sa.text("building_number_norm")],
        unique=True,
        schema=schema,
        postgresql_where=sa.text("status = 'active'"),
    )


def downgrade() -> None:
    schema = _schema()

    op.drop_index("uq_buildings_active_address", table_name="buildings", schema=schema)
    for col in ("voivodeship_code", "district_code", "community_code", "city_code", "provider_id"):
        op.drop_index(f"ix_buildings_{col}", table_name="buildings", schema=schema)
    op.drop_table("buildings", schema=schema)

    op.drop_index("uq_providers_name_ci", table_name="providers", schema=schema)
    op.drop_table("providers", schema=schema)

    for table, col in (
        ("streets", "city_code"),
        ("city_districts", "city_code"),
        ("cities", "community_code"),
        ("communities", "district_code"),
        ("districts", "voivodeship_code"),
    ):
        op.drop_index(f"ix_{table}_{col}", table_name=table, schema=schema)
    for table in ("streets", "city_districts", "cities", "communities", "districts", "voivodeships"):
        op.drop_table(table, schema=schema)
