# snippetsync/models/snippet_table.py
# Snippets referenced by share codes

from sqlalchemy import Table, Column, Text, CheckConstraint, Index

from snippetsync.db.base import metadata, UTCDateTime


snippets = Table(
    'snippets',
    metadata,
    Column('id', Text, primary_key=True),  # UUID string
    Column('title', Text, nullable=False),
    Column('description', Text, nullable=True),
    Column('language', Text, nullable=False),
    Column('code', Text, nullable=False),
    Column('visibility', Text, nullable=False, server_default='PUBLIC'),
    Column('author_id', Text, nullable=False),
    Column('created_at', UTCDateTime(), nullable=False),
    Column('updated_at', UTCDateTime(), nullable=False),
    CheckConstraint("visibility IN ('PUBLIC', 'PRIVATE')", name='ck_snippets_visibility'),
    Index('ix_snippets_author_id', 'author_id'),
)
