# ============================================================================
# jsonstub/server/__init__.py
# Server Package - FastAPI Web Server
# ============================================================================
#
# WHAT THE SERVER DOES:
# - /api/*: answers stub requests from the route table (plus ping/refresh)
# - /json/*: browses, uploads and manages the served JSON tree
# - /config/*: form endpoints that change the operator configuration
# - /events: Server-Sent Events feed of the live request log
#
# KEY MODULES:
# - api.py: create_app(), middleware, exception handler, serve()
# - state.py: ApplicationState handle shared by all routers
# - pages.py: HTML rendering for the dashboard
# - routers/: one module per URL area
#
# ============================================================================
