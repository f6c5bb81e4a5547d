"""
Storefront API request validation package.

Validation and sanitization layer placed in front of the storefront's API
resource handlers.

Package Components:
- services: schema provider contract and the built-in schema registry
- utils: validators, sanitizer, response helpers, logging and error handling
"""

__version__ = "1.0.0"
