"""Tables owned by adreports."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, MetaData, Table, Text, func

metadata = MetaData()

report_models = Table(
    "report_models",
    metadata,
    Column("organization_id", Text, primary_key=True),
    Column("template_id", Integer, primary_key=True),
    Column("model_id", Text, nullable=False),
    Column("updated_at", DateTime, server_default=func.now(), onupdate=func.now()),
)
