from logging.config import fileConfig

from sqlalchemy import create_engine
from alembic import context

from fileserver.config import settings
from fileserver.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# миграции идут через синхронные драйверы
sync_url = (
    settings.database_url
    .replace("postgresql+asyncpg", "postgresql")
    .replace("sqlite+aiosqlite", "sqlite")
)
config.set_main_option("sqlalchemy.url", sync_url)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(config.get_main_option("sqlalchemy.url"))
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
