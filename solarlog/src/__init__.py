"""
Yield logger daemon package for OpenDTU micro-inverter gateways.

Polls the OpenDTU live-data API once a minute, keeps the latest complete
snapshot of inverter and per-module readings, and writes a per-minute power
trace and a nightly daily-yield summary to their own log files.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""
