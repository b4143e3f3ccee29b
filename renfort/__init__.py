"""
Renfort - geographic mission-to-talent matching engine.

Finds verified talents near a relief mission, scores them on distance,
skills, diplomas, availability, rating and experience, and records
their applications.
"""

__app_name__ = "Renfort"
__version__ = "0.1.0"
