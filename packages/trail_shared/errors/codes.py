"""Shared error code constants.

Codes are stable machine-readable identifiers. The lower block holds codes
raised by the change-tracking pipeline.
"""

# Validation
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"

# Not found
NOT_FOUND = "NOT_FOUND"
RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

# Conflict
CONFLICT = "CONFLICT"
ALREADY_EXISTS = "ALREADY_EXISTS"

# Policy / authorization
POLICY_VIOLATION = "POLICY_VIOLATION"
PERMISSION_DENIED = "PERMISSION_DENIED"

# Dependency / external system
DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"
DEPENDENCY_TIMEOUT = "DEPENDENCY_TIMEOUT"
DEPENDENCY_UNAVAILABLE = "DEPENDENCY_UNAVAILABLE"

# Internal
INTERNAL_ERROR = "INTERNAL_ERROR"
UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"

# Change tracking
TRACKED_ENTITY_NOT_FOUND = "TRACKED_ENTITY_NOT_FOUND"
TENANT_MISMATCH = "TENANT_MISMATCH"
SNAPSHOT_UNAVAILABLE = "SNAPSHOT_UNAVAILABLE"
CHANGE_RECORD_STORAGE_FAILURE = "CHANGE_RECORD_STORAGE_FAILURE"
