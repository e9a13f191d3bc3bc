"""
Config Version Webhook - rolls Deployments when their mounted configuration changes.

This mutating admission webhook stamps each Deployment's pod template with
version markers for the config maps and secrets it mounts:
- Volume to configuration source resolution
- Back-references from each source to the Deployments using it
- Minimal annotation add/remove sets emitted as an ordered JSON Patch
"""

__version__ = "0.1.0"
