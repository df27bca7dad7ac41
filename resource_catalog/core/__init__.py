"""
Core pipeline: extraction, aggregation, README and plugin generation.
"""
