"""
learnsync - offline-first content and progress sync for K-12 learners.

Resolves content through a remote -> cache -> bundled -> placeholder chain and
records learner progress locally with best-effort, at-least-once sync to the
learning platform.
"""

__version__ = "1.0.0"
