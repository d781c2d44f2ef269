import sys
import os
from logging.config import fileConfig
from alembic import context

# Make sabi_push importable when alembic runs from a source checkout
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

# Settings load .env themselves, with the same sqlite fallback as the app
from sabi_push.config import settings
from sabi_push.database import Base, make_engine
from sabi_push.models import device, pubkey_device

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

db_url = settings.DB_URL
target_metadata = Base.metadata

# SQLite cannot ALTER most constraints in place; batch mode rebuilds the table
render_as_batch = db_url.startswith("sqlite")


def run_migrations_offline():
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=render_as_batch,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = make_engine(db_url)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=render_as_batch,
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
