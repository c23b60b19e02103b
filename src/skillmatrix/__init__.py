"""Skill matrix projection engine.

Reconstructs past and simulates future skill-fulfillment states of an
organisation from assessments, a change log, qualification measures and
role requirements.
"""

__version__ = "0.1.0"
