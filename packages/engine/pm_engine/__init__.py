"""
Project entity notification engine.

Tracks who follows a task, milestone or discussion, links stored files to
those entities, and fans out new-file / new-comment notifications to the
followers.
"""

__version__ = "0.1.0"
