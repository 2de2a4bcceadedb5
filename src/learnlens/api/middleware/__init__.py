"""API middleware package.

Manifesto:
    Cross-cutting concerns (request ids, timing, errors) belong in
    middleware so routers stay focused on the analysis endpoints.

Tags:
    learnlens, api, middleware, cross-cutting
"""
