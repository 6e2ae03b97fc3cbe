# ============================================================================
# jsonstub/__init__.py
# Development-time JSON Stub Server
# ============================================================================
#
# PURPOSE:
# Serves files from a directory tree as JSON endpoints, lets an operator remap
# /api/* paths to those files at runtime, and streams a live request log to
# the browser.
#
# ============================================================================

__version__ = "0.3.0"
