"""
vibe_affiliate.api.routers

Router modules mounted by `vibe_affiliate.api.app.create_app`.
"""

# Package marker.
