"""Shared error code constants.

Stable machine-readable codes shared by every service. Generic codes come
first; WorkflowGuard domain codes are grouped at the end.
"""

# Validation
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

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

# WorkflowGuard domain codes
INVALID_RANGE = "INVALID_RANGE"
WORKFLOW_NOT_FOUND = "WORKFLOW_NOT_FOUND"
VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
VERSION_NUMBER_CONFLICT = "VERSION_NUMBER_CONFLICT"
AUDIT_RANGE_TOO_LARGE = "AUDIT_RANGE_TOO_LARGE"
