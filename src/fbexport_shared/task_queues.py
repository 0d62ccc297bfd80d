"""Task queue name constants.

The extraction worker owns a single queue: token coordination is per process,
so every activity that reads or renews credentials must land on the same worker
pool. Both the worker runner and any workflow dispatching to it reference these.
"""

SOURCE_ACCESS_QUEUE = "source-access-queue"
