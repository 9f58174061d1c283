"""CLI - run a bot module, sign test requests, get/set config/settings.yaml."""
import argparse
import importlib
import sys
import time
from pathlib import Path

import yaml
from pydantic import ValidationError

from slackbot.bot import Bot
from slackbot.config import BotSettings, get_env
from slackbot.logger import setup_logging
from slackbot.verifier import SIGNATURE_HEADER, TIMESTAMP_HEADER, compute_signature


def _settings_path(root: Path) -> Path:
    return root / "config" / "settings.yaml"


def _load_settings(root: Path) -> dict:
    path = _settings_path(root)
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _save_settings(root: Path, data: dict) -> None:
    path = _settings_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def load_bot(target: str) -> Bot:
    """Resolve "package.module:attr" to a Bot. attr may also be a factory returning one."""
    module_name, _, attr = target.partition(":")
    module = importlib.import_module(module_name)
    obj = getattr(module, attr or "bot")
    if not isinstance(obj, Bot) and callable(obj):
        obj = obj()
    if not isinstance(obj, Bot):
        raise TypeError(f"{target} is not a slackbot.Bot")
    return obj


def cmd_run(target: str, host: str | None, port: int | None, no_verify: bool) -> None:
    """Boot the bot and block until Ctrl+C."""
    bot = load_bot(target)
    setup_logging(bot.settings.log_level)
    if no_verify:
        bot.settings.verify_signatures = False
        bot.logger.warning("Request signature verification is disabled")
    bot.run(host, port)


def cmd_routes(target: str) -> None:
    bot = load_bot(target)
    for key, count in bot.registry.describe().items():
        print(f"{key}: {count}")
    for name in bot.registry.command_names():
        print(f"  /slack/commands/{name}")


def cmd_sign(root: Path, body: str, secret: str | None, timestamp: str | None) -> None:
    """Print the headers Slack would send with body."""
    secret = secret or get_env(root).signing_secret
    if not secret:
        print("No signing secret: pass --secret or set SLACK_SIGNING_SECRET")
        sys.exit(1)
    timestamp = timestamp or str(int(time.time()))
    print(f"{TIMESTAMP_HEADER}: {timestamp}")
    print(f"{SIGNATURE_HEADER}: {compute_signature(secret, timestamp, body)}")


def _lookup(data: dict, dotted: str):
    node = data
    for part in dotted.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def cmd_config_get(root: Path, key: str) -> None:
    """Print one settings value; sections print as YAML."""
    value = _lookup(_load_settings(root), key)
    if isinstance(value, dict):
        print(yaml.safe_dump(value, default_flow_style=False, sort_keys=False), end="")
    else:
        print("" if value is None else value)


def cmd_config_set(root: Path, key: str, value: str) -> None:
    """Write one settings value. bot.* keys are checked against BotSettings before saving."""
    settings = _load_settings(root)
    *parents, leaf = key.split(".")
    node = settings
    for part in parents:
        node = node.setdefault(part, {})
    try:
        node[leaf] = yaml.safe_load(value)
    except yaml.YAMLError:
        node[leaf] = value

    if parents[:1] == ["bot"]:
        try:
            BotSettings(**settings["bot"])
        except ValidationError as e:
            print(f"Invalid value for {key}: {e.errors()[0]['msg']}")
            sys.exit(1)
    _save_settings(root, settings)
    print(f"Set {key} = {node[leaf]!r}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="slackbot", description="Slack webhook bot CLI")
    parser.add_argument("--root", default=".", help="Project root holding config/settings.yaml")
    sub = parser.add_subparsers(dest="cmd")

    run = sub.add_parser("run", help="Serve a bot until interrupted")
    run.add_argument("app", help="module:attr of a Bot or a factory returning one")
    run.add_argument("--host", default=None)
    run.add_argument("--port", type=int, default=None)
    run.add_argument("--no-verify", action="store_true", help="Skip request signature checks")

    routes = sub.add_parser("routes", help="Show what a bot has registered")
    routes.add_argument("app")

    sign = sub.add_parser("sign", help="Compute Slack signature headers for a request body")
    sign.add_argument("body", nargs="?", default=None, help="Request body (stdin if omitted)")
    sign.add_argument("--secret", default=None)
    sign.add_argument("--timestamp", default=None)

    cfg = sub.add_parser("config", help="Get/set config")
    cfg.add_argument("action", choices=["get", "set"])
    cfg.add_argument("key")
    cfg.add_argument("value", nargs="*", default=[])

    args = parser.parse_args(argv)
    root = Path(args.root)
    if str(root.resolve()) not in sys.path:
        sys.path.insert(0, str(root.resolve()))

    if args.cmd == "run":
        cmd_run(args.app, args.host, args.port, args.no_verify)
    elif args.cmd == "routes":
        cmd_routes(args.app)
    elif args.cmd == "sign":
        body = args.body if args.body is not None else sys.stdin.read()
        cmd_sign(root, body, args.secret, args.timestamp)
    elif args.cmd == "config":
        if args.action == "get":
            cmd_config_get(root, args.key)
        else:
            val = " ".join(args.value) if args.value else ""
            if not val:
                print("config set requires a value")
                sys.exit(1)
            cmd_config_set(root, args.key, val)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
