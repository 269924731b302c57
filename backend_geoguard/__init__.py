"""
Backend GeoGuard: location verification and anti-spoofing risk engine.

Decides whether a clock-in / clock-out event reported from an untrusted
device GPS reading can be trusted as proof of presence at a workplace.
Modular architecture: pure location analyzers, a risk aggregator, a config
layer, structured logging, and a thin API server for the time-tracking side.
"""

__version__ = "0.1.0"
