"""
Boundary layer for external system integrations.

Handles all interactions with external systems: the relational database,
the remote vault API, and the chat model used for summaries.
"""
