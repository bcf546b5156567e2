"""Utility modules for the Vidtube backend.

Submodules are imported directly (``from src.utils.errors import ...``);
``src.config`` depends on ``src.utils.secrets``, so nothing is re-exported
here.
"""
