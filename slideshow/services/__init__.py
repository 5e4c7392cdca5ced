"""
Service layer for business logic.

This layer separates business logic from HTTP request handling:
project/image management, video generation and video inspection.
"""
