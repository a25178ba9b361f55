"""
Live updates.

Components:
- watcher.py: polling directory watcher emitting RawChange notifications
- classifier.py: RawChange -> TaskEvent
- pipeline.py: per-path ordered dispatch from watcher to broadcaster
- broadcaster.py: fan-out of TaskEvents to subscribers
- service.py: LiveUpdates, the start/stop switch for all of the above
"""
