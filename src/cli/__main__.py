# =============================================================================
# src/cli/__main__.py — Package Entry Point
# =============================================================================
#
# Running the package itself (``python -m src.cli``) is the same as
# running the song index tool:
#     python -m src.cli stats
#     python -m src.cli.song_index stats
# =============================================================================

"""Allow ``python -m src.cli`` execution."""

from src.cli.song_index import main

main()
