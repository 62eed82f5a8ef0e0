# =============================================================================
# src/cli/__init__.py — CLI Module Overview
# =============================================================================
#
# Command-line access to the same services the API serves, for operators
# who want to build or inspect the index without running the web app.
#
#   build        fetch setlists year by year and save a fresh index
#   stats        summary numbers of the saved index
#   search       title search, with fuzzy suggestions on a miss
#   song         every performance of one song
#   resolve      scored archive recordings for a show date
#   tracks       one song's files inside a recording
#   find-artist  MusicBrainz id lookup for the setlist source
#
# Architecture Notes:
#   - argparse, not Click/Typer.
#   - Provider imports are deferred inside handlers so read-only commands
#     never touch the network clients.
#   - Each handler builds its own services; there is no DI container.
# =============================================================================

"""CLI tools for Steal Your Stats.

- ``python -m src.cli.song_index`` -- build, inspect and query the song
  index; resolve archived recordings.
"""
