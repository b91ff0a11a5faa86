"""Service layer — descriptor building, emission, and resolution.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
