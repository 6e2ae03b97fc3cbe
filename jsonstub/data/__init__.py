# ============================================================================
# jsonstub/data/__init__.py
# Data Layer Package - Operator Configuration and Served Content
# ============================================================================
#
# MODULES IN THIS PACKAGE:
# - config_store.py: Plain-text operator settings, re-read on every access
# - route_table.py: (method, /api path) -> file mapping and request resolution
# - content_store.py: Reads and manages the served JSON tree
# - content_watcher.py: Logs changes made to the JSON tree on disk
#
# ============================================================================
