"""Service layer implementations."""

from playlist_analyzer.services.exporter import TabularReport, to_json_document, to_tabular_rows
from playlist_analyzer.services.fetcher import CancellationToken, PlaylistFetcher
from playlist_analyzer.services.stats import parse_view_count, summarize

__all__ = [
    # Fetcher
    "CancellationToken",
    "PlaylistFetcher",
    # Statistics
    "parse_view_count",
    "summarize",
    # Exports
    "TabularReport",
    "to_json_document",
    "to_tabular_rows",
]
