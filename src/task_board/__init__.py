"""
task-board: a task board over a directory of JSON task files.

Components:
- tasks/: record parsing, models, and the filesystem-backed TaskStore
- live/: directory watcher, change classifier/pipeline, subscriber broadcaster
- execution/: read-only execution progress projection
- cli/: composition root and the `task-board` command
"""
