"""
Stepgraph: visual pipeline graph editing with structural validation.

The editing engine, validators, and version history behind a step-based
pipeline canvas. Rendering and execution belong to the caller.
"""

__version__ = "0.1.0"
