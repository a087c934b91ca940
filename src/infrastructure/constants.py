"""Infrastructure-related constants."""

# Database
POOL_RECYCLE_SECONDS = 3600
COMMAND_TIMEOUT_SECONDS = 60
MAX_LOGGED_STATEMENT_LENGTH = 500

# Constraint names stay stable across autogenerated migrations
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Object storage
DEFAULT_OBJECT_NAME = "upload"
PUBLIC_READ_ACL = "public-read"

# Comprehend results API
COMPREHEND_RESULTS_PATH = "microComprehend"
