"""Canonical structured logging field names.

Keeping names centralized prevents drift between modules that bind context and
formatters or log shippers that read it.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EXCEPTION = "exception"

# Service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"

# Mutation/audit correlation fields.
TENANT_ID = "tenant_id"
ENTITY_TYPE = "entity_type"
ENTITY_ID = "entity_id"
ACTOR_ID = "actor_id"
OPERATION = "operation"
RECORD_COUNT = "record_count"

# Fields formatters lift from log records, whether bound through context or
# passed per call via ``extra``.
STRUCTURED_FIELDS = (
    SERVICE,
    ENVIRONMENT,
    TENANT_ID,
    ENTITY_TYPE,
    ENTITY_ID,
    ACTOR_ID,
    OPERATION,
    RECORD_COUNT,
)
