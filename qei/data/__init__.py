"""Reference tables, ingestion and hosted-database access for the QEI engine."""

from .ingest import build_players, frame_from_rows, load_players_from_csv, read_passing_csv
from .reference import ReferenceDataError, ReferenceTables, load_reference_tables
from .supabase import SupabaseClient, SupabaseConfigurationError

__all__ = [
    "ReferenceDataError",
    "ReferenceTables",
    "SupabaseClient",
    "SupabaseConfigurationError",
    "build_players",
    "frame_from_rows",
    "load_players_from_csv",
    "load_reference_tables",
    "read_passing_csv",
]
