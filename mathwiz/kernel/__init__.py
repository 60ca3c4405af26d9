"""
Kernel Layer

Persistence for the learner profile aggregate:
- SQLAlchemy rows (models)
- The get/upsert profile store and the named-learner roster (profiles)

Engines never touch the database; they receive and return profile snapshots.
"""
