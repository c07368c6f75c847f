"""
Chat module for server-side room functionality.

Handles:
- Username registration
- Room creation, lookup and access control
- Room broadcasting
- Private chat invitations
"""
