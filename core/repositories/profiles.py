"""Postgres-backed company profile, one row per user."""

from uuid import UUID

from clients.postgres_client import PostgresClient
from core.models import CompanyProfile, CompanyProfileUpdate
from utils.timezone import now_utc

_COLUMNS = """
    user_id, company_name, email, phone, address, brand_color, tax_percent,
    invoice_prefix, default_notes, default_terms, updated_at
"""


class PostgresProfileRepository:
    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def get(self, user_id: UUID) -> CompanyProfile | None:
        row = self.postgres.execute_single(
            f"SELECT {_COLUMNS} FROM company_profiles WHERE user_id = %s",
            (user_id,),
            user_id=user_id,
        )
        return CompanyProfile.model_validate(row) if row else None

    def upsert(self, user_id: UUID, data: CompanyProfileUpdate) -> CompanyProfile:
        row = self.postgres.execute_single(
            f"""
            INSERT INTO company_profiles (
                user_id, company_name, email, phone, address, brand_color, tax_percent,
                invoice_prefix, default_notes, default_terms, updated_at
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (user_id) DO UPDATE SET
                company_name = EXCLUDED.company_name,
                email = EXCLUDED.email,
                phone = EXCLUDED.phone,
                address = EXCLUDED.address,
                brand_color = EXCLUDED.brand_color,
                tax_percent = EXCLUDED.tax_percent,
                invoice_prefix = EXCLUDED.invoice_prefix,
                default_notes = EXCLUDED.default_notes,
                default_terms = EXCLUDED.default_terms,
                updated_at = EXCLUDED.updated_at
            RETURNING {_COLUMNS}
            """,
            (
                user_id, data.company_name, data.email, data.phone, data.address,
                data.brand_color, data.tax_percent, data.invoice_prefix,
                data.default_notes, data.default_terms, now_utc(),
            ),
            user_id=user_id,
        )
        return CompanyProfile.model_validate(row)
