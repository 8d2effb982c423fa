# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Alembic environment for the portal schema.

Only online migrations over a caller-supplied connection are supported;
see ``runner.build_config``.
"""

from alembic import context

from eduportal.infrastructure.database.models import Base

connection = context.config.attributes["connection"]

context.configure(connection=connection, target_metadata=Base.metadata)

with context.begin_transaction():
    context.run_migrations()
