"""SQLAlchemy table definitions for the tenant-aware entity store.

Entity ids are canonical ULID strings. Tenant-scoped tables carry a
``tenant_id`` column; global reference tables do not.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB

from packages.trail_shared.ids import ulid_string_column

metadata = MetaData()

_JSON_DOCUMENT = JSON().with_variant(JSONB(), "postgresql")


def _id_column() -> Column[str]:
    return ulid_string_column("id", primary_key=True, nullable=False)


def _tenant_column() -> Column[str]:
    return Column("tenant_id", String(64), nullable=False)


def _active_column() -> Column[bool]:
    return Column("is_active", Boolean, nullable=False, default=True)


def _timestamp_columns() -> tuple[Column, Column]:
    return (
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("updated_at", DateTime(timezone=True), nullable=False),
    )


countries = Table(
    "countries",
    metadata,
    _id_column(),
    Column("name", String(128), nullable=False),
    Column("iso_code", String(3), nullable=False),
    Column("gdpr_status", String(64), nullable=False),
    *_timestamp_columns(),
    UniqueConstraint("iso_code", name="uq_countries_iso_code"),
)

external_organizations = Table(
    "external_organizations",
    metadata,
    _id_column(),
    _tenant_column(),
    Column("legal_name", String(256), nullable=False),
    Column("trading_name", String(256), nullable=True),
    Column("website", String(512), nullable=True),
    *_timestamp_columns(),
    Index("ix_external_organizations_tenant", "tenant_id"),
)

transfer_mechanisms = Table(
    "transfer_mechanisms",
    metadata,
    _id_column(),
    Column("name", String(256), nullable=False),
    Column("code", String(64), nullable=False),
    Column("description", Text, nullable=True),
    Column("gdpr_article", String(64), nullable=True),
    Column("category", String(64), nullable=True),
    Column(
        "requires_supplementary_measures", Boolean, nullable=False, default=False
    ),
    _active_column(),
    *_timestamp_columns(),
    UniqueConstraint("code", name="uq_transfer_mechanisms_code"),
)

data_subject_categories = Table(
    "data_subject_categories",
    metadata,
    _id_column(),
    Column("name", String(256), nullable=False),
    Column("description", Text, nullable=True),
    Column("is_vulnerable", Boolean, nullable=False, default=False),
    Column("vulnerability_reason", Text, nullable=True),
    Column("suggests_dpia", Boolean, nullable=False, default=False),
    _active_column(),
    *_timestamp_columns(),
)

legal_bases = Table(
    "legal_bases",
    metadata,
    _id_column(),
    Column("type", String(64), nullable=False),
    Column("name", String(256), nullable=False),
    Column("framework", String(64), nullable=False),
    Column("description", Text, nullable=True),
    Column("requires_consent", Boolean, nullable=False, default=False),
    Column("consent_mechanism", String(256), nullable=True),
    _active_column(),
    *_timestamp_columns(),
)

data_categories = Table(
    "data_categories",
    metadata,
    _id_column(),
    _tenant_column(),
    Column("name", String(256), nullable=False),
    Column("description", Text, nullable=True),
    Column("sensitivity", String(64), nullable=False, default="STANDARD"),
    Column("is_special_category", Boolean, nullable=False, default=False),
    _active_column(),
    *_timestamp_columns(),
    Index("ix_data_categories_tenant", "tenant_id"),
)

purposes = Table(
    "purposes",
    metadata,
    _id_column(),
    _tenant_column(),
    Column("name", String(256), nullable=False),
    Column("description", Text, nullable=True),
    Column("category", String(64), nullable=True),
    Column("scope", String(64), nullable=True),
    _active_column(),
    *_timestamp_columns(),
    Index("ix_purposes_tenant", "tenant_id"),
)

recipients = Table(
    "recipients",
    metadata,
    _id_column(),
    _tenant_column(),
    Column("name", String(256), nullable=False),
    Column("type", String(64), nullable=False),
    ulid_string_column(
        "external_organization_id",
        ForeignKey("external_organizations.id"),
        nullable=True,
    ),
    Column("purpose", String(512), nullable=True),
    Column("description", Text, nullable=True),
    ulid_string_column(
        "parent_recipient_id",
        ForeignKey("recipients.id"),
        nullable=True,
    ),
    _active_column(),
    *_timestamp_columns(),
    Index("ix_recipients_tenant", "tenant_id"),
)

digital_assets = Table(
    "digital_assets",
    metadata,
    _id_column(),
    _tenant_column(),
    Column("name", String(256), nullable=False),
    Column("description", Text, nullable=True),
    Column("type", String(64), nullable=False),
    ulid_string_column(
        "primary_hosting_country_id",
        ForeignKey("countries.id"),
        nullable=True,
    ),
    Column("hosting_detail", String(512), nullable=True),
    Column("url", String(1024), nullable=True),
    Column("technical_owner_id", String(64), nullable=True),
    Column("business_owner_id", String(64), nullable=True),
    Column("contains_personal_data", Boolean, nullable=False, default=False),
    Column("integration_status", String(64), nullable=False, default="NOT_INTEGRATED"),
    Column("last_scanned_at", DateTime(timezone=True), nullable=True),
    Column("discovered_via", String(128), nullable=True),
    Column("metadata", _JSON_DOCUMENT, nullable=True),
    _active_column(),
    *_timestamp_columns(),
    Index("ix_digital_assets_tenant", "tenant_id"),
)

asset_processing_locations = Table(
    "asset_processing_locations",
    metadata,
    _id_column(),
    _tenant_column(),
    ulid_string_column(
        "digital_asset_id",
        ForeignKey("digital_assets.id"),
        nullable=False,
    ),
    Column("service", String(256), nullable=False),
    Column("purpose_text", Text, nullable=True),
    ulid_string_column("country_id", ForeignKey("countries.id"), nullable=False),
    ulid_string_column(
        "transfer_mechanism_id",
        ForeignKey("transfer_mechanisms.id"),
        nullable=True,
    ),
    Column("location_role", String(64), nullable=False, default="BOTH"),
    Column("metadata", _JSON_DOCUMENT, nullable=True),
    _active_column(),
    *_timestamp_columns(),
    Index("ix_asset_processing_locations_tenant_asset", "tenant_id", "digital_asset_id"),
)

recipient_processing_locations = Table(
    "recipient_processing_locations",
    metadata,
    _id_column(),
    _tenant_column(),
    ulid_string_column("recipient_id", ForeignKey("recipients.id"), nullable=False),
    Column("service", String(256), nullable=False),
    Column("purpose_text", Text, nullable=True),
    ulid_string_column("country_id", ForeignKey("countries.id"), nullable=False),
    ulid_string_column(
        "transfer_mechanism_id",
        ForeignKey("transfer_mechanisms.id"),
        nullable=True,
    ),
    Column("location_role", String(64), nullable=False, default="BOTH"),
    Column("metadata", _JSON_DOCUMENT, nullable=True),
    _active_column(),
    *_timestamp_columns(),
    Index(
        "ix_recipient_processing_locations_tenant_recipient",
        "tenant_id",
        "recipient_id",
    ),
)

data_processing_activities = Table(
    "data_processing_activities",
    metadata,
    _id_column(),
    _tenant_column(),
    Column("name", String(256), nullable=False),
    Column("description", Text, nullable=True),
    Column("risk_level", String(32), nullable=True),
    Column("requires_dpia", Boolean, nullable=True),
    Column("dpia_status", String(64), nullable=True),
    Column("retention_period_value", Integer, nullable=True),
    Column("retention_period_unit", String(32), nullable=True),
    Column("retention_justification", Text, nullable=True),
    Column("status", String(32), nullable=False, default="DRAFT"),
    *_timestamp_columns(),
    Index("ix_data_processing_activities_tenant", "tenant_id"),
)

ENTITY_TABLES: dict[str, Table] = {
    "Country": countries,
    "ExternalOrganization": external_organizations,
    "TransferMechanism": transfer_mechanisms,
    "DataSubjectCategory": data_subject_categories,
    "LegalBasis": legal_bases,
    "DataCategory": data_categories,
    "Purpose": purposes,
    "Recipient": recipients,
    "DigitalAsset": digital_assets,
    "AssetProcessingLocation": asset_processing_locations,
    "RecipientProcessingLocation": recipient_processing_locations,
    "DataProcessingActivity": data_processing_activities,
}

GLOBAL_ENTITY_TYPES = frozenset(
    {"Country", "TransferMechanism", "DataSubjectCategory", "LegalBasis"}
)

SYSTEM_COLUMNS = frozenset({"id", "tenant_id", "created_at", "updated_at"})
