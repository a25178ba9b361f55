"""
Task subsystem.

Components:
- task_models.py: data structures (TaskRecord, TaskList, TaskEvent)
- task_parser.py: loose JSON -> validated TaskRecord
- task_store.py: filesystem-backed read API over <root>/<list>/<task>.json
"""
