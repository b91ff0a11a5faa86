"""Domain layer — references, descriptors, attribute rules, errors.

This layer depends only on stdlib, pydantic and markupsafe.
It must never import from services, infrastructure, commands, or config.
"""
