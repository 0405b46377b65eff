"""archguide: a respectful, resumable Arch Linux installation guide.

Core design goals:
- Ask permission before anything that alters the system
- Let the operator edit every proposed command
- Resumable: steps probe their own status, progress is remembered
- Plain-text, hand-editable persistence
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
