"""
Red Bank account monitor entry points.

`handler.run_once()` performs a single scan-and-report pass; `python -m monitor`
runs it from the console.
"""
