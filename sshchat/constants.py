import os

CONFIG_FILE = os.environ.get("SSH_CHAT_CONFIG", "chat_server.json")
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 2222
DEFAULT_HOST_KEY_PATH = "ssh_host_key"
DEFAULT_LOG_LEVEL = "INFO"
MAX_CONNECTION_COUNT = 128
MESSAGE_LOG_SIZE = 10
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

ENV_OVERRIDES = {
    "MAX_CONNECTION_COUNT": "max_sessions",
    "MESSAGE_LOG_SIZE": "history_size",
    "SSH_CHAT_HOST": "host",
    "SSH_CHAT_PORT": "port",
    "SSH_CHAT_HOST_KEY": "host_key_path",
    "PRIVATE_KEY": "private_key",
    "SSH_CHAT_LOG_LEVEL": "log_level",
}

NEWLINE = "\r\n"
TAB = "\t"
PROMPT = "> "
WHISPER_PROMPT_PREFIX = "@"
BANNER_RULE = "=" * 45

CSI = "\x1b["
COLOUR_RESET = "\x1b[0m"
COLOURS = [
    "\x1b[31m",
    "\x1b[32m",
    "\x1b[33m",
    "\x1b[34m",
    "\x1b[35m",
    "\x1b[36m",
    "\x1b[37m",
]

EXEC_NOT_SUPPORTED = "Sorry, no commands are currently implemented in the chat server"
CAPACITY_EXCEEDED = (
    "Sorry, the server is currently at capacity, please try again later "
    "or contact an administrator"
)
USERNAME_IN_USE = (
    "Sorry, the username '{username}' is already in use, "
    "please reconnect with another name"
)
NO_OTHER_USERS = "No one else is here 😢"
WHISPER_TARGET_GONE = (
    "Your whisper target is no longer connected, whisper mode has been disabled"
)
