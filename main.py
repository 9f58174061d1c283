"""Slackbot - CLI entry point. Config via config/settings.yaml or SLACK_* env vars."""
import sys
from pathlib import Path

ROOT = Path(__file__).parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slackbot.cli import main

if __name__ == "__main__":
    main()
