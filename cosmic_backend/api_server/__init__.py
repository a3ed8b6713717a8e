"""
API server package: HTTP/REST interface.

Exposes the session cache, activity feed and match history to the display
layer, plus chain-backed refresh and action recording. Delegates to the
database and services layers for data.
"""
