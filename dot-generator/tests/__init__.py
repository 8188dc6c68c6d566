"""
Test package for the dot-density generator.

This package contains tests for:
- Pydantic models and geometry variants
- Ring selection, population lookup and dot quotas
- Rejection sampling and the centroid fallback
- Projection fitting and input loading
"""
