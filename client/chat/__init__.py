"""
Chat module for client-side messaging functionality.

Handles:
- Connecting to the chat server
- Relaying typed lines to the server
- Displaying server lines
"""
