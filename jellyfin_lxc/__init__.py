"""Provision Jellyfin in an unprivileged Proxmox VE LXC container.

Core design goals:
- Resumable, idempotent steps
- Host commands behind small capability interfaces
- Append-only edits to /etc/fstab and the container config
- Centralized logging
"""

__version__ = "0.1.0"
