"""
Exit codes for the taskdeck CLI.

Semantic exit codes let scripts tell a bad argument from a missing task.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Resource not found
ERROR_NOT_FOUND = 5

# Storage could not be read or written
ERROR_PERSISTENCE = 7
