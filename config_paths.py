import os

HOME = os.path.expanduser("~")
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME")
CONFIG_HOME = XDG_CONFIG_HOME if XDG_CONFIG_HOME else os.path.join(HOME, ".config")
CONFIG_DIR = os.path.join(CONFIG_HOME, "hsearch")
HISTORY_PATH = os.path.join(CONFIG_DIR, "history.csv")
LOG_PATH = os.path.join(CONFIG_DIR, "hsearch.log")
CONFIG_JSON = os.path.join(CONFIG_DIR, "config.json")

# set by shell integrations so an aborted search doesn't wipe the prompt
TERM_INTEGRATION_ENV = "HSEARCH_TERM_INTEGRATION"

# default settings
DISPLAYED_COLUMNS_DEFAULT = [
    "Hostname",
    "CWD",
    "Timestamp",
    "Runtime",
    "Exit Code",
    "Command",
]
FILTER_DUPLICATE_COMMANDS_DEFAULT = False
SERVER_URL_DEFAULT = None


def ensure_config_dirs():
    os.makedirs(CONFIG_DIR, exist_ok=True)


def load_config():
    cfg = {
        "DISPLAYED_COLUMNS": list(DISPLAYED_COLUMNS_DEFAULT),
        "FILTER_DUPLICATE_COMMANDS": FILTER_DUPLICATE_COMMANDS_DEFAULT,
        "SERVER_URL": SERVER_URL_DEFAULT,
        "HISTORY_PATH": HISTORY_PATH,
    }

    if os.path.exists(CONFIG_JSON):
        try:
            import json

            with open(CONFIG_JSON, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                columns = data.get("displayed_columns")
                if isinstance(columns, list) and columns:
                    cfg["DISPLAYED_COLUMNS"] = [
                        str(item) for item in columns if isinstance(item, str)
                    ]
                dedup = data.get("filter_duplicate_commands")
                if isinstance(dedup, bool):
                    cfg["FILTER_DUPLICATE_COMMANDS"] = dedup
                server = data.get("server_url")
                if isinstance(server, str) and server.strip():
                    cfg["SERVER_URL"] = server.strip().rstrip("/")
                history_path = data.get("history_path")
                if isinstance(history_path, str) and history_path.strip():
                    cfg["HISTORY_PATH"] = os.path.expanduser(history_path.strip())
        except Exception:
            pass

    return cfg
