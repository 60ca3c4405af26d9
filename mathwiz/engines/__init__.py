"""
Pure rule engines: mastery, achievements, difficulty.
"""
