"""
API server package: HTTP endpoints for location verification.

FastAPI app exposing the verification gate, anti-spoofing evaluation,
and coordinate formatting to the time-tracking subsystem.
"""
