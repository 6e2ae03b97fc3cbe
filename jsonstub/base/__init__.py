# ============================================================================
# jsonstub/base/__init__.py
# ============================================================================
#
# WHAT'S IN THIS PACKAGE:
# - config.py: Process configuration (paths, logging, listen address)
# - path_guard.py: Traversal checks applied before every filesystem access
#
# ============================================================================
