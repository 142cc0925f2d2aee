"""Reusable test data builders."""
