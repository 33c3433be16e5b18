from sqlalchemy import engine_from_config, pool
from alembic import context

# ---- App imports: URL + models metadata ----
from app.core.config import get_settings
from app.core.logging import setup_logging
from app.db.session import database_url
from app.models.base import Base

# IMPORTANT: import modules that DEFINE tables (side effects register them)
import app.models.author  # registers Author

# Alembic Config
config = context.config

# Tests call alembic programmatically and keep their own logging.
if config.attributes.get("configure_logger", True):
    setup_logging()

# An explicit sqlalchemy.url wins; otherwise build it from app settings
if not config.get_main_option("sqlalchemy.url"):
    url = database_url(get_settings().postgres).render_as_string(hide_password=False)
    config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))

# Autogenerate will read from this
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
