"""
hipp_admin.api.routers

Router modules, one per resource.
"""

# Package marker.
