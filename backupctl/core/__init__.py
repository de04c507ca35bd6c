"""Configuration, logging and errors shared by every backupctl module."""
