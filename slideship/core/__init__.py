"""Core presentation primitives (markup compiler, layout, slide lifecycle).

Kept free of FastAPI concerns so it can be reused by API routes, renderers, and tests.
"""
