"""
vincent.integrations - External Collaborator Layer
====================================================

Adapters for the two collaborators the engine depends on but does not own.
Each sits behind an abstract interface so a real backend and a test double
are interchangeable.

Sub-packages:
    sandbox/   - Where policy code runs (local in-process, mock)
    resolver/  - Which policies apply to an invocation (in-memory)
"""

__all__: list[str] = []
