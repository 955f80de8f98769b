"""
HTTP layer: the application factory, route modules and the mapping from
domain exceptions to ``{error, message}`` responses.
"""
