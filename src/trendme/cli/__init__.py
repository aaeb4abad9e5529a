"""trendme command line interface.

Feature packages:
- core/: Shared console, result types and service wiring
- persona/: Persona creation and influencer listing
- post/: Grid post creation, resume and listing
- news/: Cached news, live trends and sub-topics
- maintenance/: Checkpoint housekeeping

Usage:
    trendme --help
    trendme create-persona "sustainable fashion" --user u1
"""

from .app import app, main

__all__ = ["app", "main"]
