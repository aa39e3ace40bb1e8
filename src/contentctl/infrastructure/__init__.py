"""Infrastructure layer: filesystem storage, templates, repositories.

This layer depends on stdlib, third-party libs (Jinja2), and the domain
layer. It must never import from services, commands, or output.
"""
