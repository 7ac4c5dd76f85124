"""Paired remote/local sample collection.

One URL at a time, ``SampleCoordinator`` launches every WebPageTest attempt
concurrently, waits for the first one to settle, then runs the unthrottled
local attempts one by one before joining the rest of the remote attempts.
``CollectionRunner`` owns the persisted summary that makes a long run
resumable: finished URLs are skipped and the summary is rewritten after
each newly collected URL.
"""
