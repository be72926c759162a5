"""Lambda handler implementations.

Contains the Lambda handlers for:
- Chat webhook notification routing
- The cloud server auth proxy
"""
