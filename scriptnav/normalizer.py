"""Strip package-manager invocation prefixes from command strings."""

import re

# Priority order matters: "npm run x" must not be read as "npm" + "run"
_PREFIXES = (
    re.compile(r"^(?:npm|pnpm|yarn|bun)\s+run\s+"),
    re.compile(r"^npx\s+"),
    re.compile(r"^(?:npm|pnpm|yarn|bun)\s+"),
    re.compile(r"^node\s+"),
)


def normalize_command(raw: str) -> str:
    """Reduce a command line to the token that names the script or binary.

    At most one prefix is removed, then everything after the first whitespace
    is dropped. The result contains no whitespace, so normalizing it again is a
    no-op.

    Examples:
        >>> normalize_command("npm run build -- --watch")
        'build'
        >>> normalize_command("npx eslint .")
        'eslint'
        >>> normalize_command("node server.js")
        'server.js'
    """
    normalized = raw.strip()
    for prefix in _PREFIXES:
        if prefix.match(normalized):
            normalized = prefix.sub("", normalized, count=1).strip()
            break
    parts = normalized.split()
    return parts[0] if parts else ""


def is_package_manager_invocation(line: str) -> bool:
    """True when a shell line starts with npm, npx, pnpm, yarn, bun or node."""
    return line.strip().startswith(("npm", "npx", "pnpm", "yarn", "bun", "node"))
