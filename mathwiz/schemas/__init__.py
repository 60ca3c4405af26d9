"""
Pydantic schemas for the learner profile and the API.
"""
