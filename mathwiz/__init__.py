"""
MathWiz Academy - learner progress and mastery service.
"""
