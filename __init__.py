"""Statement import package.

This package turns bank and broker statement exports (CSV, OFX, QFX)
into statement drafts for the personal finance app.  See
``process_statements.py`` and ``mcp_server.py`` for entry points.
"""
