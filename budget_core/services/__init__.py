"""
Services Package

External collaborators the engine talks to: the remote backend
(source of truth) and audit log storage.
"""
