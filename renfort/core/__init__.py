"""
Core business logic modules for Renfort.

Submodules:
- matching: Mission-to-talent matching engine and scoring
- geo: Bounding box and Haversine distance helpers
- lifecycle: Mission status state machine
- exceptions: Domain error taxonomy
"""
