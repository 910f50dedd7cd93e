"""Entry point for python -m agent_search execution.

This module enables running agent-search as a module:
    python -m agent_search --help
    python -m agent_search search "authentication"
"""

from agent_search.cli import app

if __name__ == "__main__":
    app()
