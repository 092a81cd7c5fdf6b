"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Named constants (page size, layer names, endpoints)
- exceptions: Custom exception hierarchy
"""
