"""
CLI Module.

Command-line surface built with Typer. Commands resolve settings, hand a
CommandKind to the router and let it talk to the coordinator.

Usage:
    backupctl --help
    backupctl list nodes --verbose
    backupctl run backup --description nightly --storage s3-main
"""
