"""
hipp_admin.services

Service-layer package.

Responsibilities:
- Own transaction boundaries (one commit per mutating operation).
- Translate storage outcomes into domain errors from `hipp_admin.errors`.
"""

# Package marker.
