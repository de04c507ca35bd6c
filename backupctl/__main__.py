"""Allow `python -m backupctl`."""

from backupctl.cli.main import main

if __name__ == "__main__":
    main()
