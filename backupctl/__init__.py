"""
backupctl - command-line client for the backup coordinator.

Build metadata below is rewritten by the release pipeline.
"""

__version__ = "0.1.0"
__commit__ = "none"
__build__ = "date"
__branch__ = "master"
