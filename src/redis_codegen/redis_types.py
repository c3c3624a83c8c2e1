"""Types and constants that describe the Redis command-set vocabulary."""

from __future__ import annotations

from typing import Literal

PlacementType = Literal["nested", "shortest"]


class RedisArgType:
    """Argument type tags, as they appear in `commands.json`."""

    STRING = "string"
    INTEGER = "integer"
    DOUBLE = "double"
    KEY = "key"
    PATTERN = "pattern"
    UNIX_TIME = "unix-time"
    PURE_TOKEN = "pure-token"
    ONEOF = "oneof"
    BLOCK = "block"

    COMPOSITE = frozenset({ONEOF, BLOCK})


# Scalar argument types and the Python type their values are declared with in generated types.
REDIS_SCALAR_TO_PYTHON: dict[str, str] = {
    RedisArgType.STRING: "str",
    RedisArgType.KEY: "str",
    RedisArgType.PATTERN: "str",
    RedisArgType.INTEGER: "int",
    RedisArgType.UNIX_TIME: "int",
    RedisArgType.DOUBLE: "float",
}

# Parameter types of generated command builders. Keys, patterns and strings accept any argument value.
REDIS_PARAMETER_TO_PYTHON: dict[str, str] = {
    RedisArgType.STRING: "RedisArg",
    RedisArgType.KEY: "RedisArg",
    RedisArgType.PATTERN: "RedisArg",
    RedisArgType.INTEGER: "int",
    RedisArgType.UNIX_TIME: "int",
    RedisArgType.DOUBLE: "float",
}

DEFAULT_TYPES_MODULE = "arg_types"
DEFAULT_COMMANDS_MODULE = "commands"
DEFAULT_RUNTIME_MODULE = "redis_codegen.runtime"

# Display names of command groups used in generated docstrings.
COMMAND_GROUPS: dict[str, str] = {
    "bitmap": "Bitmap",
    "cluster": "Cluster",
    "connection": "Connection",
    "generic": "Generic",
    "geo": "Geo",
    "hash": "Hash",
    "hyperloglog": "HyperLogLog",
    "list": "List",
    "pubsub": "PubSub",
    "scripting": "Scripting",
    "sentinel": "Sentinel",
    "server": "Server",
    "set": "Set",
    "sorted-set": "SortedSet",
    "stream": "Stream",
    "string": "String",
    "transactions": "Transactions",
}

COMMAND_FLAGS: dict[str, str] = {
    "admin": "Admin: This command is an administrative command.",
    "allow_busy": "AllowBusy: Allow the command while the server is blocked by a script or module.",
    "asking": "Asking: Cluster related: accept even if the hash slot is imported.",
    "blocking": "Blocking: The command may block the requesting client.",
    "denyoom": "Denyoom: This command is rejected if the server is out of memory.",
    "fast": "Fast: This command operates in constant or log(N) time.",
    "loading": "Loading: This command is allowed while the database is loading.",
    "may_replicate": "MayReplicate: This command may be replicated to replicas and the AOF.",
    "no_async_loading": "NoAsyncLoading: This command is denied during asynchronous loading.",
    "no_auth": "NoAuth: Executing this command doesn't require authentication.",
    "no_mandatory_keys": "NoMandatoryKeys: This command may take key name arguments, but these aren't mandatory.",
    "no_multi": "NoMulti: This command isn't allowed inside the context of a transaction.",
    "noscript": "Noscript: This command can't be called from scripts or functions.",
    "ok_loading": "OkLoading: This command is allowed while the database is loading.",
    "ok_stale": "OkStale: This command is allowed while a replica has stale data.",
    "pubsub": "Pubsub: This command is related to Redis Pub/Sub.",
    "readonly": "Readonly: This command doesn't modify data.",
    "sentinel": "Sentinel: This command is present in sentinel mode.",
    "skip_monitor": "SkipMonitor: This command is not shown in MONITOR's output.",
    "skip_slowlog": "SkipSlowlog: This command is not shown in SLOWLOG's output.",
    "stale": "Stale: This command is allowed while a replica has stale data.",
    "write": "Write: This command may modify data.",
}

# Commands that return cursors or need hand-written handling in a client.
COMMAND_BLACKLIST = frozenset({"SCAN", "HSCAN", "SSCAN", "ZSCAN", "CLIENT KILL", "OBJECT"})

# Command builder names that differ from the snake-cased command name.
COMMAND_NAME_OVERWRITE: dict[str, str] = {
    "MOVE": "move_key",
}
