"""Hypothesis strategies for stepgraph tests."""
