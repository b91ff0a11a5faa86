"""Infrastructure layer — signing, entity lookup, templates, markup.

This layer depends on stdlib and third-party libs (SQLAlchemy, Jinja2,
markupsafe). It may import from domain but never from services,
commands, or output.
"""
