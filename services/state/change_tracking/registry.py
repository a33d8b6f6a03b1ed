"""Tracked-field registry.

A closed whitelist of compliance-relevant fields per entity type. Fields not
listed here never reach the diff engine; free-text descriptions and opaque
metadata documents are left out on purpose. When an entity type carries the
active flag it is always the final entry.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class ReferenceSpec:
    """Foreign-key field expanded into a reference sub-object in snapshots."""

    field: str
    relation: str
    entity_type: str
    attributes: tuple[str, ...]


@dataclass(frozen=True)
class TrackedEntitySpec:
    """Ordered tracked fields and reference expansions for one entity type."""

    entity_type: str
    fields: tuple[str, ...]
    references: tuple[ReferenceSpec, ...] = ()


COUNTRY_ATTRIBUTES = ("name", "iso_code", "gdpr_status")
TRANSFER_MECHANISM_ATTRIBUTES = ("name", "code", "gdpr_article")
EXTERNAL_ORGANIZATION_ATTRIBUTES = ("legal_name",)

_LOCATION_FIELDS = ("country_id", "transfer_mechanism_id", "location_role", "is_active")
_LOCATION_REFERENCES = (
    ReferenceSpec(
        field="country_id",
        relation="country",
        entity_type="Country",
        attributes=COUNTRY_ATTRIBUTES,
    ),
    ReferenceSpec(
        field="transfer_mechanism_id",
        relation="transfer_mechanism",
        entity_type="TransferMechanism",
        attributes=TRANSFER_MECHANISM_ATTRIBUTES,
    ),
)

DEFAULT_TRACKED_ENTITIES: tuple[TrackedEntitySpec, ...] = (
    TrackedEntitySpec(
        entity_type="DigitalAsset",
        fields=(
            "name",
            "type",
            "primary_hosting_country_id",
            "hosting_detail",
            "url",
            "technical_owner_id",
            "business_owner_id",
            "contains_personal_data",
            "integration_status",
            "last_scanned_at",
            "discovered_via",
            "is_active",
        ),
        references=(
            ReferenceSpec(
                field="primary_hosting_country_id",
                relation="primary_hosting_country",
                entity_type="Country",
                attributes=COUNTRY_ATTRIBUTES,
            ),
        ),
    ),
    TrackedEntitySpec(
        entity_type="AssetProcessingLocation",
        fields=_LOCATION_FIELDS,
        references=_LOCATION_REFERENCES,
    ),
    TrackedEntitySpec(
        entity_type="RecipientProcessingLocation",
        fields=_LOCATION_FIELDS,
        references=_LOCATION_REFERENCES,
    ),
    TrackedEntitySpec(
        entity_type="DataProcessingActivity",
        fields=(
            "risk_level",
            "requires_dpia",
            "dpia_status",
            "retention_period_value",
            "retention_period_unit",
            "retention_justification",
            "status",
        ),
    ),
    TrackedEntitySpec(
        entity_type="TransferMechanism",
        fields=(
            "name",
            "code",
            "gdpr_article",
            "category",
            "requires_supplementary_measures",
            "is_active",
        ),
    ),
    TrackedEntitySpec(
        entity_type="DataSubjectCategory",
        fields=(
            "name",
            "is_vulnerable",
            "vulnerability_reason",
            "suggests_dpia",
            "is_active",
        ),
    ),
    TrackedEntitySpec(
        entity_type="DataCategory",
        fields=("name", "sensitivity", "is_special_category", "is_active"),
    ),
    TrackedEntitySpec(
        entity_type="Purpose",
        fields=("name", "category", "scope", "is_active"),
    ),
    TrackedEntitySpec(
        entity_type="LegalBasis",
        fields=(
            "type",
            "name",
            "framework",
            "requires_consent",
            "consent_mechanism",
            "is_active",
        ),
    ),
    TrackedEntitySpec(
        entity_type="Recipient",
        fields=(
            "type",
            "external_organization_id",
            "purpose",
            "parent_recipient_id",
            "is_active",
        ),
        references=(
            ReferenceSpec(
                field="external_organization_id",
                relation="external_organization",
                entity_type="ExternalOrganization",
                attributes=EXTERNAL_ORGANIZATION_ATTRIBUTES,
            ),
        ),
    ),
)


class TrackedFieldRegistry:
    """Lookup of tracked fields and reference expansions by entity type."""

    def __init__(
        self,
        specs: Iterable[TrackedEntitySpec],
        *,
        active_flag_field: str = "is_active",
    ) -> None:
        self._active_flag_field = active_flag_field
        self._specs: dict[str, TrackedEntitySpec] = {}
        for spec in specs:
            self._validate(spec)
            if spec.entity_type in self._specs:
                raise ValueError(f"duplicate tracked entity type: {spec.entity_type}")
            self._specs[spec.entity_type] = spec

    @property
    def active_flag_field(self) -> str:
        return self._active_flag_field

    def entity_types(self) -> tuple[str, ...]:
        return tuple(self._specs)

    def is_tracked(self, entity_type: str) -> bool:
        return entity_type in self._specs

    def fields_for(self, entity_type: str) -> tuple[str, ...]:
        """Return tracked fields in order, or ``()`` for untracked types."""
        spec = self._specs.get(entity_type)
        return () if spec is None else spec.fields

    def references_for(self, entity_type: str) -> tuple[ReferenceSpec, ...]:
        spec = self._specs.get(entity_type)
        return () if spec is None else spec.references

    def _validate(self, spec: TrackedEntitySpec) -> None:
        if not spec.fields:
            raise ValueError(f"{spec.entity_type} must track at least one field")
        if len(set(spec.fields)) != len(spec.fields):
            raise ValueError(f"{spec.entity_type} lists a tracked field twice")
        if (
            self._active_flag_field in spec.fields
            and spec.fields[-1] != self._active_flag_field
        ):
            raise ValueError(
                f"{spec.entity_type} must list {self._active_flag_field} last"
            )
        for reference in spec.references:
            if reference.field not in spec.fields:
                raise ValueError(
                    f"{spec.entity_type} reference {reference.relation} "
                    f"uses untracked field {reference.field}"
                )
            if not reference.attributes:
                raise ValueError(
                    f"{spec.entity_type} reference {reference.relation} has no attributes"
                )


def default_registry(*, active_flag_field: str = "is_active") -> TrackedFieldRegistry:
    """Build the registry over the built-in compliance entity types."""
    return TrackedFieldRegistry(
        DEFAULT_TRACKED_ENTITIES, active_flag_field=active_flag_field
    )
