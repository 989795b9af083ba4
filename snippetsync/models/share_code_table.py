# snippetsync/models/share_code_table.py
# Temporary share codes (6 chars, 5 minute lifetime) pointing at a snippet

from sqlalchemy import Table, Column, Integer, String, Text, ForeignKey, Index

from snippetsync.db.base import metadata, UTCDateTime


share_codes = Table(
    'share_codes',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('code', String(6), nullable=False, unique=True),
    Column(
        'snippet_id',
        Text,
        ForeignKey('snippets.id', ondelete='CASCADE'),
        nullable=False,
    ),
    Column('created_at', UTCDateTime(), nullable=False),
    Column('expires_at', UTCDateTime(), nullable=False),
    Index('ix_share_codes_expires_at', 'expires_at'),  # sweep
    Index('ix_share_codes_snippet_id_created_at', 'snippet_id', 'created_at'),
)
